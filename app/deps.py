# app/deps.py
import logging

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.db.base import SessionLocal
from app.services.supa_auth import verify_bearer
from app.services import profile_service as svc_profile

logger = logging.getLogger(__name__)

# ----------------------------
# DB 세션
# ----------------------------
def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()  # commit 포함
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

# ----------------------------
# 현재 사용자 가져오기
# ----------------------------
async def get_current_user(
    authorization: str | None = Header(None),
    db: Session = Depends(get_db),
):
    """
    Supabase access token 검증 후 프로필을 붙여서 반환한다.
    프로필이 없으면 (첫 로그인) 생성한다.
    """
    try:
        claims = await verify_bearer(authorization)
    except ValueError as e:
        logger.info("[AUTH] verify_bearer failed: %s", e)
        raise HTTPException(status_code=401, detail="unauthorized")

    prof = svc_profile.ensure_profile(db, claims["user_id"], claims.get("email"))

    return {
        "id": claims["user_id"],
        "email": claims.get("email"),
        "profile": prof,
    }


# ----------------------------
# 정지되지 않은 사용자 (글쓰기/업로드/메시지)
# ----------------------------
def get_active_user(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if svc_profile.refresh_suspension(db, user["profile"]):
        raise HTTPException(status_code=403, detail="account_suspended")
    return user


# ----------------------------
# 관리자 / 운영자 권한 (has_role)
# ----------------------------
def require_moderator(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not (svc_profile.has_role(db, user["id"], "admin") or svc_profile.has_role(db, user["id"], "moderator")):
        raise HTTPException(status_code=403, detail="forbidden")
    return user


def require_admin(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not svc_profile.has_role(db, user["id"], "admin"):
        raise HTTPException(status_code=403, detail="forbidden")
    return user
