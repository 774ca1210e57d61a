# app/services/profile_service.py
# 프로필 / 권한 / 업로드 한도 / 정지 상태 관련 로직
import logging
import re
import uuid
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.models.common import as_aware, utcnow
from app.models.profile import Profile, UserRole

logger = logging.getLogger(__name__)

ROLES = ("admin", "moderator", "user")

# 하루 업로드 한도 (일반 / VIP)
DAILY_UPLOAD_LIMIT = 3
VIP_DAILY_UPLOAD_LIMIT = 10

PUBLIC_FIELDS = ("user_id", "username", "display_name", "avatar_url", "bio", "is_vip", "is_verified", "created_at")


# ----------------------------
# RPC: has_role / get_public_profile
# ----------------------------
def has_role(db: Session, user_id: str, role: str) -> bool:
    return (
        db.query(UserRole)
        .filter(UserRole.user_id == user_id, UserRole.role == role)
        .first()
        is not None
    )


def get_role(db: Session, user_id: str) -> str:
    row = db.query(UserRole).filter(UserRole.user_id == user_id).first()
    return row.role if row else "user"


def set_role(db: Session, user_id: str, role: str) -> UserRole:
    """사용자당 역할 1개: 있으면 수정, 없으면 생성"""
    if role not in ROLES:
        raise ValueError(f"unknown role: {role}")
    row = db.query(UserRole).filter(UserRole.user_id == user_id).first()
    if row:
        row.role = role
    else:
        row = UserRole(user_id=user_id, role=role)
        db.add(row)
    return row


def public_dict(profile: Profile) -> Dict:
    out = {k: getattr(profile, k) for k in PUBLIC_FIELDS}
    if out["created_at"] is not None:
        out["created_at"] = out["created_at"].isoformat()
    return out


def get_public_profile(db: Session, user_id: str) -> Optional[Dict]:
    prof = db.query(Profile).filter(Profile.user_id == user_id).first()
    return public_dict(prof) if prof else None


def public_profiles_map(db: Session, user_ids: Iterable[str]) -> Dict[str, Dict]:
    """작성자 프로필 일괄 조회 (user_id -> public dict)"""
    ids = list({u for u in user_ids if u})
    if not ids:
        return {}
    rows = db.query(Profile).filter(Profile.user_id.in_(ids)).all()
    return {p.user_id: public_dict(p) for p in rows}


# ----------------------------
# 최초 로그인 시 프로필 생성
# ----------------------------
def _username_base(email: Optional[str]) -> str:
    local = (email or "").split("@", 1)[0]
    base = re.sub(r"[^0-9A-Za-z_]", "", local)[:20]
    return base or "user"


def ensure_profile(db: Session, user_id: str, email: Optional[str] = None,
                   username: Optional[str] = None, display_name: Optional[str] = None) -> Profile:
    prof = db.query(Profile).filter(Profile.user_id == user_id).first()
    if prof is not None:
        return prof

    username = username or _username_base(email)
    if db.query(Profile).filter(Profile.username == username).first() is not None:
        username = f"{username}_{uuid.uuid4().hex[:6]}"

    prof = Profile(user_id=user_id, username=username, display_name=display_name or username)
    db.add(prof)
    db.commit()
    db.refresh(prof)
    logger.info("[PROFILE] created profile user_id=%s username=%s", user_id, username)
    return prof


# ----------------------------
# 정지 상태
# ----------------------------
def refresh_suspension(db: Session, profile: Profile) -> bool:
    """기간이 지난 정지는 해제. 현재 정지 여부 반환"""
    if not profile.is_suspended:
        return False
    until = as_aware(profile.suspended_until)
    if until is not None and until <= utcnow():
        profile.is_suspended = False
        profile.suspended_until = None
        profile.suspension_reason = None
        db.commit()
        logger.info("[PROFILE] suspension expired user_id=%s", profile.user_id)
        return False
    return True


# ----------------------------
# 업로드 한도
# ----------------------------
def upload_limit(profile: Profile) -> int:
    return VIP_DAILY_UPLOAD_LIMIT if profile.is_vip else DAILY_UPLOAD_LIMIT


def uploads_used_today(profile: Profile, today: Optional[date] = None) -> int:
    today = today or utcnow().date()
    if profile.last_upload_date != today:
        return 0
    return profile.daily_upload_count or 0


def upload_quota(profile: Profile) -> Dict[str, int]:
    limit = upload_limit(profile)
    used = uploads_used_today(profile)
    return {"limit": limit, "used": used, "remaining": max(0, limit - used)}


def record_upload(profile: Profile, today: Optional[date] = None) -> None:
    today = today or utcnow().date()
    profile.daily_upload_count = uploads_used_today(profile, today) + 1
    profile.last_upload_date = today


def usernames_map(db: Session, user_ids: Iterable[str]) -> Dict[str, str]:
    ids: List[str] = list({u for u in user_ids if u})
    if not ids:
        return {}
    rows = db.query(Profile.user_id, Profile.username).filter(Profile.user_id.in_(ids)).all()
    return {uid: name for uid, name in rows}
