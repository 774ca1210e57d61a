# app/routers/admin.py
# 관리자 백오피스: 신고 처리 / 사용자 / 사진 / 토론 관리 / 통계
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.deps import get_db, require_admin, require_moderator
from app.models.forum import ForumTopic
from app.models.photo import Photo
from app.models.profile import Profile, UserRole
from app.services import admin_service as svc_admin
from app.services import forum_service as svc_forum
from app.services import photo_service as svc_photo
from app.services import profile_service as svc_profile
from app.services import report_service as svc_report

router = APIRouter(prefix="/api/admin", tags=["admin"])

# ---------- Schemas ----------
class ReportActionIn(BaseModel):
    action: Literal["resolve", "dismiss", "hide", "warn"]
    note: str | None = Field(None, max_length=1000)

class SuspendIn(BaseModel):
    days: int | None = Field(None, ge=1, le=3650)  # 없으면 무기한
    reason: str | None = Field(None, max_length=500)

class BanIn(BaseModel):
    days: int = Field(..., ge=1, le=3650)
    reason: str | None = Field(None, max_length=500)

class RoleIn(BaseModel):
    role: Literal["admin", "moderator", "user"]

class PhotoFlagsIn(BaseModel):
    is_featured: bool | None = None
    is_hidden: bool | None = None

class BulkPhotoIn(BaseModel):
    ids: List[str] = Field(..., min_length=1)
    field: Literal["is_featured", "is_hidden"]
    value: bool

class OrderIn(BaseModel):
    ids: List[str]

# ---------- 대시보드 / 통계 ----------
@router.get("/dashboard")
def dashboard(_=Depends(require_moderator), db: Session = Depends(get_db)):
    return svc_admin.dashboard_stats(db)


@router.get("/analytics")
def analytics(
    days: int = Query(30, ge=1, le=365),
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    return svc_admin.analytics(db, days)

# ---------- 신고 ----------
@router.get("/reports")
def list_reports(
    status: str = "pending",
    content_type: str = "all",
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    return svc_report.list_reports(db, status=status, content_type=content_type)


@router.post("/reports/{report_id}/actions")
def report_action(
    report_id: str,
    body: ReportActionIn,
    moderator=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    """대기(pending) 상태 신고만 처리 가능, 그 외는 409"""
    report = svc_report.apply_action(db, report_id, body.action, moderator["id"], body.note)
    db.commit()
    return svc_report.serialize_report(report)

# ---------- 사용자 ----------
def _get_profile(db: Session, user_id: str) -> Profile:
    prof = db.query(Profile).filter(Profile.user_id == user_id).first()
    if prof is None:
        raise HTTPException(status_code=404, detail="user_not_found")
    return prof


def _user_dict(p: Profile, role: str) -> dict:
    return {
        **svc_profile.public_dict(p),
        "role": role,
        "warning_count": p.warning_count or 0,
        "is_suspended": bool(p.is_suspended),
        "suspended_until": p.suspended_until.isoformat() if p.suspended_until else None,
        "suspension_reason": p.suspension_reason,
    }


@router.get("/users")
def list_users(
    q: Optional[str] = None,
    page: int = Query(0, ge=0),
    page_size: int = Query(50, ge=1, le=200),
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    query = db.query(Profile)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Profile.username.ilike(like), Profile.display_name.ilike(like)))
    rows = query.order_by(Profile.created_at.desc()).offset(page * page_size).limit(page_size).all()

    roles = dict(
        db.query(UserRole.user_id, UserRole.role)
        .filter(UserRole.user_id.in_([p.user_id for p in rows]))
        .all()
    ) if rows else {}
    return [_user_dict(p, roles.get(p.user_id, "user")) for p in rows]


@router.post("/users/{user_id}/suspend")
def suspend_user(
    user_id: str,
    body: SuspendIn,
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    prof = svc_admin.suspend(_get_profile(db, user_id), body.days, body.reason)
    db.commit()
    return _user_dict(prof, svc_profile.get_role(db, user_id))


@router.post("/users/{user_id}/ban")
def ban_user(
    user_id: str,
    body: BanIn,
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    prof = svc_admin.suspend(_get_profile(db, user_id), body.days, body.reason or f"停權 {body.days} 天")
    db.commit()
    return _user_dict(prof, svc_profile.get_role(db, user_id))


@router.post("/users/{user_id}/unsuspend")
def unsuspend_user(
    user_id: str,
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    prof = svc_admin.unsuspend(_get_profile(db, user_id))
    db.commit()
    return _user_dict(prof, svc_profile.get_role(db, user_id))


@router.put("/users/{user_id}/role")
def set_user_role(
    user_id: str,
    body: RoleIn,
    _=Depends(require_admin),
    db: Session = Depends(get_db),
):
    prof = _get_profile(db, user_id)
    svc_profile.set_role(db, user_id, body.role)
    db.commit()
    return _user_dict(prof, body.role)

# ---------- 사진 ----------
@router.get("/photos")
def list_photos(
    filter: Literal["all", "featured", "hidden"] = "all",
    q: Optional[str] = None,
    page: int = Query(0, ge=0),
    page_size: int = Query(20, ge=1, le=100),
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    query = db.query(Photo)
    if filter == "featured":
        query = query.filter(Photo.is_featured.is_(True))
    elif filter == "hidden":
        query = query.filter(Photo.is_hidden.is_(True))
    if q:
        query = query.filter(Photo.title.ilike(f"%{q}%"))

    total = query.count()
    rows = query.order_by(Photo.created_at.desc()).offset(page * page_size).limit(page_size).all()
    return {"total": total, "items": [svc_photo.serialize_photo(p) for p in rows]}


@router.patch("/photos/{photo_id}")
def update_photo_flags(
    photo_id: str,
    body: PhotoFlagsIn,
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    photo = db.get(Photo, photo_id)
    if photo is None:
        raise HTTPException(status_code=404, detail="photo_not_found")
    if body.is_featured is not None:
        photo.is_featured = body.is_featured
    if body.is_hidden is not None:
        photo.is_hidden = body.is_hidden
    db.commit()
    return svc_photo.serialize_photo(photo)


@router.post("/photos/bulk")
def bulk_update_photos(
    body: BulkPhotoIn,
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    column = getattr(Photo, body.field)
    updated = (
        db.query(Photo)
        .filter(Photo.id.in_(body.ids))
        .update({column: body.value}, synchronize_session=False)
    )
    db.commit()
    return {"updated": updated}


@router.put("/photos/featured-order")
def save_featured_order(
    body: OrderIn,
    _=Depends(require_moderator),
    db: Session = Depends(get_db),
):
    """행마다 featured_order 를 순서대로 기록 (중간 실패 시 앞 행은 반영된 상태)"""
    return {"updated": svc_admin.save_order(db, Photo, body.ids, column="featured_order")}

# ---------- 토론 관리 ----------
def _toggle_topic(db: Session, topic_id: str, field: str) -> dict:
    topic = db.get(ForumTopic, topic_id)
    if topic is None:
        raise HTTPException(status_code=404, detail="topic_not_found")
    setattr(topic, field, not getattr(topic, field))
    db.commit()
    return svc_forum.serialize_topic(topic)


@router.post("/topics/{topic_id}/toggle-pin")
def toggle_pin(topic_id: str, _=Depends(require_moderator), db: Session = Depends(get_db)):
    return _toggle_topic(db, topic_id, "is_pinned")


@router.post("/topics/{topic_id}/toggle-lock")
def toggle_lock(topic_id: str, _=Depends(require_moderator), db: Session = Depends(get_db)):
    return _toggle_topic(db, topic_id, "is_locked")
