# app/routers/photos.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.deps import get_db, get_current_user, get_active_user
from app.models.photo import Photo, PhotoRating, Tag
from app.services import photo_service as svc_photo
from app.services import profile_service as svc_profile
from app.services import recommendation

router = APIRouter(prefix="/api", tags=["photos"])

FEATURED_LIMIT = 8

_SORTS = {
    "latest": (Photo.created_at.desc(),),
    "popular": (Photo.like_count.desc(), Photo.created_at.desc()),
    "rating": (Photo.average_rating.desc(), Photo.rating_count.desc()),
    "views": (Photo.view_count.desc(), Photo.created_at.desc()),
}

# ---------- Schemas ----------
class RatingIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)

class CommentIn(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    parent_id: str | None = None

# ---------- Helpers ----------
def _with_authors(db: Session, photos: List[Photo]) -> List[dict]:
    authors = svc_profile.public_profiles_map(db, (p.user_id for p in photos))
    return [svc_photo.serialize_photo(p, authors.get(p.user_id)) for p in photos]

# ---------- 목록 ----------
@router.get("/photos")
def list_photos(
    category: Optional[str] = None,
    brand: Optional[str] = None,
    q: Optional[str] = None,
    sort: Literal["latest", "popular", "rating", "views"] = "latest",
    page: int = Query(0, ge=0),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """무한 스크롤: page * page_size 부터 page_size 개"""
    query = db.query(Photo).filter(Photo.is_hidden.is_(False))
    if category and category != "all":
        query = query.filter(Photo.category == category)
    if brand:
        query = query.filter(Photo.brand == brand)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Photo.title.ilike(like),
            Photo.brand.ilike(like),
            Photo.camera_body.ilike(like),
            Photo.phone_model.ilike(like),
        ))
    rows = query.order_by(*_SORTS[sort]).offset(page * page_size).limit(page_size + 1).all()
    return {
        "items": _with_authors(db, rows[:page_size]),
        "has_more": len(rows) > page_size,
    }


@router.get("/photos/featured")
def featured_photos(db: Session = Depends(get_db)):
    rows = (
        db.query(Photo)
        .filter(Photo.is_hidden.is_(False))
        .order_by(
            Photo.is_featured.desc(),
            Photo.featured_order.asc().nullslast(),
            Photo.average_rating.desc(),
            Photo.like_count.desc(),
        )
        .limit(FEATURED_LIMIT)
        .all()
    )
    return _with_authors(db, rows)


@router.get("/tags")
def suggest_tags(q: str = "", db: Session = Depends(get_db)):
    query = db.query(Tag)
    if q:
        query = query.filter(Tag.name.ilike(f"%{q}%"))
    return [{"id": t.id, "name": t.name, "slug": t.slug} for t in query.order_by(Tag.name).limit(10).all()]

# ---------- 상세 ----------
@router.get("/photos/{photo_id}")
def get_photo(photo_id: str, db: Session = Depends(get_db)):
    photo = svc_photo.get_visible_photo(db, photo_id)
    photo.view_count = (photo.view_count or 0) + 1
    db.commit()
    return {
        **svc_photo.serialize_photo(photo, svc_profile.get_public_profile(db, photo.user_id)),
        "exif_data": photo.exif_data,
        "tags": svc_photo.tags_for(db, photo.id),
    }

# ---------- 업로드 ----------
@router.post("/photos", status_code=201)
async def upload_photos(
    files: List[UploadFile] = File(...),
    title: str = Form(...),
    category: str = Form(...),
    description: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    phone_model: Optional[str] = Form(None),
    camera_body: Optional[str] = Form(None),
    lens: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),  # 쉼표 구분
    user=Depends(get_active_user),
    db: Session = Depends(get_db),
):
    """
    여러 장 업로드. 파일마다 순서대로 리사이즈 → 업로드 → 저장(커밋).
    중간에 실패하면 앞선 파일은 그대로 남고 502 에 저장된 id 목록을 돌려준다.
    """
    data = [
        svc_photo.UploadFileData(filename=f.filename or "", content_type=f.content_type or "", data=await f.read())
        for f in files
    ]
    created = svc_photo.upload_photos(
        db,
        user["profile"],
        data,
        title=title,
        category=category,
        description=description,
        brand=brand,
        phone_model=phone_model,
        camera_body=camera_body,
        lens=lens,
        tags=tags.split(",") if tags else None,
    )
    return {
        "items": [svc_photo.serialize_photo(p) for p in created],
        "quota": svc_profile.upload_quota(user["profile"]),
    }

# ---------- 삭제 ----------
@router.delete("/photos/{photo_id}", status_code=204)
def delete_photo(
    photo_id: str,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    photo = db.get(Photo, photo_id)
    if photo is None:
        raise HTTPException(status_code=404, detail="photo_not_found")
    is_mod = svc_profile.has_role(db, user["id"], "admin") or svc_profile.has_role(db, user["id"], "moderator")
    if photo.user_id != user["id"] and not is_mod:
        raise HTTPException(status_code=403, detail="forbidden")
    svc_photo.delete_photo(db, photo)
    db.commit()
    return

# ---------- 평점 ----------
@router.get("/photos/{photo_id}/rating")
def my_rating(
    photo_id: str,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = (
        db.query(PhotoRating)
        .filter(PhotoRating.photo_id == photo_id, PhotoRating.user_id == user["id"])
        .first()
    )
    return {"rating": row.rating if row else None}


@router.put("/photos/{photo_id}/rating")
def rate_photo(
    photo_id: str,
    body: RatingIn,
    user=Depends(get_active_user),
    db: Session = Depends(get_db),
):
    photo = svc_photo.get_visible_photo(db, photo_id)
    row = svc_photo.upsert_rating(db, photo, user["id"], body.rating)
    db.commit()
    return {
        "rating": row.rating,
        "average_rating": float(photo.average_rating or 0),
        "rating_count": photo.rating_count or 0,
    }

# ---------- 댓글 ----------
@router.get("/photos/{photo_id}/comments")
def list_comments(photo_id: str, db: Session = Depends(get_db)):
    svc_photo.get_visible_photo(db, photo_id)
    return svc_photo.threaded_comments(db, photo_id)


@router.post("/photos/{photo_id}/comments", status_code=201)
def create_comment(
    photo_id: str,
    body: CommentIn,
    user=Depends(get_active_user),
    db: Session = Depends(get_db),
):
    photo = svc_photo.get_visible_photo(db, photo_id)
    comment = svc_photo.add_comment(db, photo, user["id"], body.content, body.parent_id)
    db.commit()
    return {
        "id": comment.id,
        "photo_id": comment.photo_id,
        "user_id": comment.user_id,
        "content": comment.content,
        "parent_id": comment.parent_id,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
    }

# ---------- 추천 ----------
@router.get("/photos/{photo_id}/similar")
def similar_photos(photo_id: str, db: Session = Depends(get_db)):
    photo = svc_photo.get_visible_photo(db, photo_id)
    return _with_authors(db, recommendation.similar_photos(db, photo))
