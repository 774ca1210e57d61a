# app/services/image_service.py
# 업로드 이미지 리사이즈 / 썸네일 (OpenCV)
import logging
from dataclasses import dataclass

import cv2
import numpy as np

logger = logging.getLogger(__name__)

MAX_WIDTH = 1920
MAX_HEIGHT = 1920
JPEG_QUALITY = 85
THUMBNAIL_SIZE = 400
THUMBNAIL_QUALITY = 80


class ImageDecodeError(ValueError):
    """이미지로 읽을 수 없는 파일"""


@dataclass
class ResizedImage:
    data: bytes
    width: int
    height: int


def decode(raw: bytes) -> np.ndarray:
    buf = np.frombuffer(raw, dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
    if img is None:
        raise ImageDecodeError("cannot decode image")
    return img


def fit_size(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """비율 유지하면서 최대 크기 안으로 맞춘다 (작은 이미지는 그대로)"""
    if width <= max_width and height <= max_height:
        return width, height
    ratio = min(max_width / width, max_height / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def resize_image(raw: bytes, max_width: int = MAX_WIDTH, max_height: int = MAX_HEIGHT,
                 quality: int = JPEG_QUALITY) -> ResizedImage:
    img = decode(raw)
    h, w = img.shape[:2]
    new_w, new_h = fit_size(w, h, max_width, max_height)
    if (new_w, new_h) != (w, h):
        img = cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_AREA)

    ok, encoded = cv2.imencode(".jpg", img, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    if not ok:
        raise ImageDecodeError("cannot encode jpeg")
    logger.debug("[IMAGE] resized %sx%s -> %sx%s", w, h, new_w, new_h)
    return ResizedImage(data=encoded.tobytes(), width=new_w, height=new_h)


def create_thumbnail(raw: bytes, size: int = THUMBNAIL_SIZE) -> ResizedImage:
    return resize_image(raw, size, size, THUMBNAIL_QUALITY)
