# app/services/photo_service.py
# 갤러리 업로드 / 평점 / 댓글 / 삭제
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.favorite import Favorite
from app.models.photo import Photo, PhotoRating, Comment, Tag, ContentTag
from app.models.profile import Profile
from app.services import content_ref, image_service, storage_service
from app.services import notification_service as svc_notify
from app.services import profile_service as svc_profile

logger = logging.getLogger(__name__)


@dataclass
class UploadFileData:
    filename: str
    content_type: str
    data: bytes


# ----------------------------
# 직렬화
# ----------------------------
def serialize_photo(p: Photo, author: Optional[Dict] = None) -> Dict:
    return {
        "id": p.id,
        "user_id": p.user_id,
        "title": p.title,
        "description": p.description,
        "image_url": p.image_url,
        "thumbnail_url": p.thumbnail_url,
        "category": p.category,
        "brand": p.brand,
        "phone_model": p.phone_model,
        "camera_body": p.camera_body,
        "lens": p.lens,
        "like_count": p.like_count or 0,
        "comment_count": p.comment_count or 0,
        "view_count": p.view_count or 0,
        "average_rating": float(p.average_rating or 0),
        "rating_count": p.rating_count or 0,
        "is_featured": bool(p.is_featured),
        "featured_order": p.featured_order,
        "is_hidden": bool(p.is_hidden),
        "created_at": p.created_at.isoformat() if p.created_at else None,
        "author": author,
    }


def get_visible_photo(db: Session, photo_id: str) -> Photo:
    p = db.get(Photo, photo_id)
    if p is None or p.is_hidden:
        raise HTTPException(status_code=404, detail="photo_not_found")
    return p


# ----------------------------
# 태그
# ----------------------------
def _slugify(name: str) -> str:
    return "-".join(name.lower().split())


def get_or_create_tag(db: Session, name: str) -> Tag:
    tag = db.query(Tag).filter(Tag.name == name).first()
    if tag is None:
        tag = Tag(name=name, slug=_slugify(name))
        db.add(tag)
        db.flush()
    return tag


def attach_tags(db: Session, photo_id: str, names: List[str]) -> None:
    for name in dict.fromkeys(n.strip() for n in names if n and n.strip()):
        tag = get_or_create_tag(db, name)
        db.add(ContentTag(tag_id=tag.id, content_type="photo", content_id=photo_id))


def tags_for(db: Session, photo_id: str) -> List[str]:
    rows = (
        db.query(Tag.name)
        .join(ContentTag, ContentTag.tag_id == Tag.id)
        .filter(ContentTag.content_type == "photo", ContentTag.content_id == photo_id)
        .order_by(Tag.name)
        .all()
    )
    return [r[0] for r in rows]


# ----------------------------
# 업로드 (파일별 순차 처리, 실패해도 앞선 파일은 롤백하지 않음)
# ----------------------------
def _batch_error(status_code: int, message: str, index: int, created: List[Photo]) -> HTTPException:
    # 앞서 저장된 파일 id 를 같이 돌려준다
    return HTTPException(
        status_code=status_code,
        detail={
            "message": message,
            "failed_index": index,
            "uploaded_ids": [p.id for p in created],
        },
    )


def upload_photos(
    db: Session,
    profile: Profile,
    files: List[UploadFileData],
    title: str,
    category: str,
    description: Optional[str] = None,
    brand: Optional[str] = None,
    phone_model: Optional[str] = None,
    camera_body: Optional[str] = None,
    lens: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> List[Photo]:
    if not files:
        raise HTTPException(status_code=400, detail="no_files")
    if not title.strip():
        raise HTTPException(status_code=400, detail="title_required")
    for f in files:
        if not (f.content_type or "").startswith("image/"):
            raise HTTPException(status_code=400, detail="invalid_file_type")

    quota = svc_profile.upload_quota(profile)
    if len(files) > quota["remaining"]:
        raise HTTPException(
            status_code=429,
            detail={"message": "upload_quota_exceeded", **quota},
        )

    user_id = profile.user_id
    created: List[Photo] = []

    for index, f in enumerate(files):
        token = uuid.uuid4().hex[:9]
        timestamp = int(time.time() * 1000)
        file_name = f"{user_id}/{timestamp}_{token}.jpg"
        thumb_name = f"{user_id}/{timestamp}_{token}_thumb.jpg"

        try:
            resized = image_service.resize_image(f.data)
            thumbnail = image_service.create_thumbnail(f.data)
        except image_service.ImageDecodeError as e:
            logger.warning("[UPLOAD] file %s/%s undecodable user_id=%s: %s", index + 1, len(files), user_id, e)
            raise _batch_error(400, "invalid_image", index, created)

        try:
            image_url = storage_service.upload_photo(file_name, resized.data)
        except storage_service.StorageError as e:
            logger.error("[UPLOAD] file %s/%s failed user_id=%s: %s", index + 1, len(files), user_id, e)
            raise _batch_error(502, "upload_failed", index, created)

        # 썸네일 실패는 무시 (thumbnail_url = None)
        try:
            thumb_url = storage_service.upload_photo(thumb_name, thumbnail.data)
        except storage_service.StorageError:
            thumb_url = None

        photo = Photo(
            user_id=user_id,
            title=f"{title} - {token}" if len(files) > 1 else title,
            description=description,
            image_url=image_url,
            thumbnail_url=thumb_url,
            category=category,
            brand=brand,
            phone_model=phone_model if category == "phone" else None,
            camera_body=camera_body if category == "camera" else None,
            lens=lens if category == "camera" else None,
        )
        db.add(photo)
        db.flush()
        if tags:
            attach_tags(db, photo.id, tags)
        svc_profile.record_upload(profile)
        db.commit()
        created.append(photo)
        logger.info("[UPLOAD] photo saved id=%s (%s/%s)", photo.id, index + 1, len(files))

    return created


# ----------------------------
# 평점 (photo_id, user_id) upsert
# ----------------------------
def refresh_rating_stats(db: Session, photo: Photo) -> None:
    avg, count = (
        db.query(func.avg(PhotoRating.rating), func.count(PhotoRating.id))
        .filter(PhotoRating.photo_id == photo.id)
        .one()
    )
    photo.average_rating = round(float(avg or 0), 2)
    photo.rating_count = count or 0


def upsert_rating(db: Session, photo: Photo, user_id: str, rating: int) -> PhotoRating:
    if not 1 <= rating <= 5:
        raise HTTPException(status_code=400, detail="invalid_rating")

    row = (
        db.query(PhotoRating)
        .filter(PhotoRating.photo_id == photo.id, PhotoRating.user_id == user_id)
        .first()
    )
    if row:
        row.rating = rating
    else:
        row = PhotoRating(photo_id=photo.id, user_id=user_id, rating=rating)
        db.add(row)
    db.flush()
    refresh_rating_stats(db, photo)

    svc_notify.notify(
        db, photo.user_id, "rating", "您的作品收到新評分",
        content=f"{rating} 星", ref=content_ref.PhotoRef(photo.id), actor_id=user_id,
    )
    return row


# ----------------------------
# 댓글 (최상위 + 1단계 답글)
# ----------------------------
def add_comment(db: Session, photo: Photo, user_id: str, content: str,
                parent_id: Optional[str] = None) -> Comment:
    content = (content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="content_required")

    parent = None
    if parent_id:
        parent = db.get(Comment, parent_id)
        if parent is None or parent.photo_id != photo.id or parent.is_hidden:
            raise HTTPException(status_code=404, detail="parent_comment_not_found")
        if parent.parent_id is not None:
            # 답글의 부모는 반드시 최상위 댓글
            raise HTTPException(status_code=400, detail="reply_depth_exceeded")

    comment = Comment(photo_id=photo.id, user_id=user_id, content=content, parent_id=parent_id)
    db.add(comment)
    photo.comment_count = (photo.comment_count or 0) + 1
    db.flush()

    svc_notify.notify(
        db, photo.user_id, "comment", "您的作品有新留言",
        content=content[:100], ref=content_ref.PhotoRef(photo.id), actor_id=user_id,
    )
    if parent is not None and parent.user_id != photo.user_id:
        svc_notify.notify(
            db, parent.user_id, "comment", "您的留言有新回覆",
            content=content[:100], ref=content_ref.PhotoRef(photo.id), actor_id=user_id,
        )
    return comment


def _serialize_comment(c: Comment, profiles: Dict[str, Dict]) -> Dict:
    return {
        "id": c.id,
        "user_id": c.user_id,
        "content": c.content,
        "parent_id": c.parent_id,
        "created_at": c.created_at.isoformat() if c.created_at else None,
        "profile": profiles.get(c.user_id),
    }


def threaded_comments(db: Session, photo_id: str) -> List[Dict]:
    rows = (
        db.query(Comment)
        .filter(Comment.photo_id == photo_id, Comment.is_hidden.is_(False))
        .order_by(Comment.created_at.asc())
        .all()
    )
    profiles = svc_profile.public_profiles_map(db, (c.user_id for c in rows))

    top_level = [c for c in rows if c.parent_id is None]
    replies = [c for c in rows if c.parent_id is not None]
    return [
        {
            **_serialize_comment(c, profiles),
            "replies": [_serialize_comment(r, profiles) for r in replies if r.parent_id == c.id],
        }
        for c in top_level
    ]


# ----------------------------
# 삭제 (종속 행 수동 삭제)
# ----------------------------
def delete_photo(db: Session, photo: Photo) -> None:
    pid = photo.id
    db.query(Comment).filter(Comment.photo_id == pid, Comment.parent_id.isnot(None)).delete(synchronize_session=False)
    db.query(Comment).filter(Comment.photo_id == pid).delete(synchronize_session=False)
    db.query(PhotoRating).filter(PhotoRating.photo_id == pid).delete(synchronize_session=False)
    db.query(ContentTag).filter(ContentTag.content_type == "photo", ContentTag.content_id == pid).delete(synchronize_session=False)
    db.query(Favorite).filter(Favorite.content_type == "photo", Favorite.content_id == pid).delete(synchronize_session=False)
    db.delete(photo)
    logger.info("[PHOTO] deleted id=%s", pid)
