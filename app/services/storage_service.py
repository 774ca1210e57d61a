# app/services/storage_service.py
# Supabase Storage 업로드 (public 버킷: photos / avatars / verification)
import logging

from app.config import settings
from app.services.supabase_client import get_service_supabase

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """버킷 업로드 실패"""


def upload_bytes(bucket_name: str, dest_path: str, data: bytes,
                 content_type: str = "image/jpeg", upsert: bool = False) -> str:
    """
    - Supabase Storage에 바이트 업로드
    - 반환값: bucket 내의 파일 경로
    """
    try:
        get_service_supabase().storage.from_(bucket_name).upload(dest_path, data, {
            "content-type": content_type,
            "upsert": "true" if upsert else "false",
        })
    except Exception as e:
        logger.error("[STORAGE] upload failed bucket=%s path=%s: %s", bucket_name, dest_path, e)
        raise StorageError(str(e)) from e
    return dest_path


def get_public_url(bucket_name: str, path: str) -> str:
    return get_service_supabase().storage.from_(bucket_name).get_public_url(path)


def upload_public(bucket_name: str, dest_path: str, data: bytes,
                  content_type: str = "image/jpeg", upsert: bool = False) -> str:
    """업로드 후 public URL 반환"""
    upload_bytes(bucket_name, dest_path, data, content_type=content_type, upsert=upsert)
    return get_public_url(bucket_name, dest_path)


def upload_photo(dest_path: str, data: bytes) -> str:
    return upload_public(settings.photos_bucket, dest_path, data)


def upload_avatar(dest_path: str, data: bytes) -> str:
    return upload_public(settings.avatars_bucket, dest_path, data, upsert=True)


def upload_verification(dest_path: str, data: bytes, content_type: str = "image/jpeg") -> str:
    return upload_public(settings.verification_bucket, dest_path, data, content_type=content_type)


def upload_listing_image(dest_path: str, data: bytes, content_type: str = "image/jpeg") -> str:
    """중고거래 추가 사진은 photos 버킷에 저장"""
    return upload_public(settings.photos_bucket, dest_path, data, content_type=content_type)
