# app/routers/profiles.py
import time

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.deps import get_db, get_current_user
from app.models.photo import Photo
from app.models.profile import Profile
from app.services import image_service, storage_service
from app.services import photo_service as svc_photo
from app.services import profile_service as svc_profile

router = APIRouter(prefix="/api", tags=["profiles"])

# ---------- Schemas ----------
class ProfileUpdateIn(BaseModel):
    username: str | None = Field(None, min_length=2, max_length=50)
    display_name: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=500)
    phone: str | None = Field(None, max_length=30)

# ---------- Helpers ----------
def _my_profile_dict(p: Profile) -> dict:
    return {
        **svc_profile.public_dict(p),
        "phone": p.phone,
        "warning_count": p.warning_count or 0,
        "is_suspended": bool(p.is_suspended),
        "suspended_until": p.suspended_until.isoformat() if p.suspended_until else None,
        "suspension_reason": p.suspension_reason,
    }

# ---------- Endpoints ----------
@router.get("/me/profile")
def get_my_profile(user=Depends(get_current_user)):
    return _my_profile_dict(user["profile"])


@router.patch("/me/profile")
def update_my_profile(
    body: ProfileUpdateIn,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile: Profile = user["profile"]

    if body.username is not None and body.username != profile.username:
        taken = (
            db.query(Profile.id)
            .filter(Profile.username == body.username, Profile.user_id != profile.user_id)
            .first()
        )
        if taken:
            raise HTTPException(status_code=409, detail="username_taken")
        profile.username = body.username
    if body.display_name is not None:
        profile.display_name = body.display_name.strip() or None
    if body.bio is not None:
        profile.bio = body.bio
    if body.phone is not None:
        profile.phone = body.phone or None

    db.commit()
    return _my_profile_dict(profile)


@router.post("/me/avatar")
async def upload_avatar(
    file: UploadFile = File(...),
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """avatars 버킷에 덮어쓰기 업로드, 캐시 무효화용 ?t= 붙여서 저장"""
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="invalid_file_type")
    raw = await file.read()
    try:
        resized = image_service.resize_image(raw, 512, 512)
    except image_service.ImageDecodeError:
        raise HTTPException(status_code=400, detail="invalid_image")

    try:
        url = storage_service.upload_avatar(f"{user['id']}/avatar.jpg", resized.data)
    except storage_service.StorageError:
        raise HTTPException(status_code=502, detail="upload_failed")

    profile: Profile = user["profile"]
    profile.avatar_url = f"{url}?t={int(time.time() * 1000)}"
    db.commit()
    return {"avatar_url": profile.avatar_url}


@router.get("/me/upload-quota")
def upload_quota(user=Depends(get_current_user)):
    return svc_profile.upload_quota(user["profile"])


@router.get("/profiles/{user_id}")
def public_profile(user_id: str, db: Session = Depends(get_db)):
    prof = svc_profile.get_public_profile(db, user_id)
    if prof is None:
        raise HTTPException(status_code=404, detail="profile_not_found")

    photos = (
        db.query(Photo)
        .filter(Photo.user_id == user_id, Photo.is_hidden.is_(False))
        .order_by(Photo.created_at.desc())
        .all()
    )
    return {
        "profile": prof,
        "photos": [svc_photo.serialize_photo(p) for p in photos],
    }
