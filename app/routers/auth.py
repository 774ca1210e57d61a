# app/routers/auth.py
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from sqlalchemy.orm import Session

from app.deps import get_db, get_current_user
from app.models.profile import Profile
from app.services import auth_service as svc_auth
from app.services import profile_service as svc_profile
from app.services import site_service as svc_site

router = APIRouter(prefix="/api/auth", tags=["auth"])

# ---------- Schemas ----------
class SignupIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    username: str | None = Field(None, max_length=50)
    display_name: str | None = Field(None, max_length=100)

class LoginIn(BaseModel):
    email: EmailStr
    password: str

class SessionOut(BaseModel):
    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    user_id: str | None = None
    email: str | None = None

class MeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    email: str | None = None
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    role: str
    is_vip: bool
    is_verified: bool
    is_suspended: bool
    suspended_until: datetime | None = None
    suspension_reason: str | None = None
    created_at: datetime | None = None

# ---------- Endpoints ----------
@router.post("/signup", response_model=SessionOut, status_code=201)
def signup(body: SignupIn, db: Session = Depends(get_db)):
    """
    Supabase 이메일 회원가입.
    - system_settings.registration_enabled 가 "false" 면 403
    - 세션이 바로 나오면 프로필도 같이 생성
    """
    if not svc_site.setting_enabled(db, "registration_enabled", default=True):
        raise HTTPException(status_code=403, detail="registration_disabled")

    result = svc_auth.sign_up(body.email, body.password, body.username, body.display_name)
    if result["user_id"]:
        svc_profile.ensure_profile(
            db, result["user_id"], body.email,
            username=body.username, display_name=body.display_name,
        )
    return SessionOut(**result)


@router.post("/login", response_model=SessionOut)
def login(body: LoginIn):
    return SessionOut(**svc_auth.sign_in(body.email, body.password))


@router.get("/me", response_model=MeOut)
def me(user=Depends(get_current_user), db: Session = Depends(get_db)):
    """
    현재 로그인한 사용자 정보 조회.
    - 인증: Supabase Access Token (Authorization: Bearer <token>)
    - 정지 기간이 지났으면 여기서 해제된다
    """
    profile: Profile = user["profile"]
    svc_profile.refresh_suspension(db, profile)
    return MeOut(
        id=user["id"],
        email=user["email"],
        username=profile.username,
        display_name=profile.display_name,
        avatar_url=profile.avatar_url,
        role=svc_profile.get_role(db, user["id"]),
        is_vip=bool(profile.is_vip),
        is_verified=bool(profile.is_verified),
        is_suspended=bool(profile.is_suspended),
        suspended_until=profile.suspended_until,
        suspension_reason=profile.suspension_reason,
        created_at=profile.created_at,
    )


@router.post("/logout", status_code=204)
def logout():
    """
    서버 세션은 없음. 클라에서 supabase.auth.signOut() 호출.
    이 엔드포인트는 UX용으로 204만 반환.
    """
    return
