# app/services/auth_service.py
# Supabase Auth 이메일/비밀번호 로그인, 회원가입
import logging
from typing import Dict, Optional

from fastapi import HTTPException

from app.services.supabase_client import get_supabase

logger = logging.getLogger(__name__)

# Supabase 에러 메시지 -> (status, detail)
_ERROR_PATTERNS = (
    ("Invalid login credentials", 401, "invalid_credentials"),
    ("User already registered", 409, "user_already_registered"),
    ("Email not confirmed", 403, "email_not_confirmed"),
)


def classify_auth_error(message: str) -> HTTPException:
    for needle, status, detail in _ERROR_PATTERNS:
        if needle.lower() in (message or "").lower():
            return HTTPException(status_code=status, detail=detail)
    return HTTPException(status_code=400, detail={"message": "auth_failed", "detail": message})


def _session_dict(res) -> Dict:
    session = getattr(res, "session", None)
    user = getattr(res, "user", None)
    return {
        "access_token": session.access_token if session else None,
        "refresh_token": session.refresh_token if session else None,
        "expires_in": session.expires_in if session else None,
        "user_id": user.id if user else None,
        "email": user.email if user else None,
    }


def sign_in(email: str, password: str) -> Dict:
    try:
        res = get_supabase().auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        logger.info("[AUTH] sign in failed email=%s: %s", email, e)
        raise classify_auth_error(str(e))
    return _session_dict(res)


def sign_up(email: str, password: str, username: Optional[str] = None,
            display_name: Optional[str] = None) -> Dict:
    """세션은 이메일 인증 설정에 따라 없을 수 있다"""
    metadata = {k: v for k, v in (("username", username), ("display_name", display_name)) if v}
    try:
        res = get_supabase().auth.sign_up({
            "email": email,
            "password": password,
            "options": {"data": metadata},
        })
    except Exception as e:
        logger.info("[AUTH] sign up failed email=%s: %s", email, e)
        raise classify_auth_error(str(e))
    return _session_dict(res)
