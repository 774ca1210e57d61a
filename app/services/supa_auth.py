# app/services/supa_auth.py
import logging
from typing import Dict

from jose import JWTError, jwt

from app.config import settings

logger = logging.getLogger(__name__)

SUPABASE_JWT_SECRET = settings.supabase_jwt_secret
SUPABASE_ISSUER = settings.supabase_issuer
SUPABASE_JWT_AUDIENCE = settings.supabase_jwt_audience

if not SUPABASE_JWT_SECRET:
    raise RuntimeError("SUPABASE_JWT_SECRET 환경변수가 설정되어 있지 않습니다.")


def decode_access_token(token: str) -> Dict[str, str | None]:
    """
    Supabase access token(HS256) 검증 후 sub/email 반환.
    WebSocket 처럼 Authorization 헤더를 못 쓰는 경우 토큰 문자열로 직접 호출한다.
    """
    if not token:
        raise ValueError("invalid token")

    decode_kwargs = {
        "key": SUPABASE_JWT_SECRET,
        "algorithms": ["HS256"],  # Supabase access token 의 alg
        "options": {"verify_aud": bool(SUPABASE_JWT_AUDIENCE), "verify_iss": bool(SUPABASE_ISSUER)},
    }
    if SUPABASE_JWT_AUDIENCE:
        decode_kwargs["audience"] = SUPABASE_JWT_AUDIENCE  # "authenticated"
    if SUPABASE_ISSUER:
        decode_kwargs["issuer"] = SUPABASE_ISSUER          # "https://.../auth/v1"

    try:
        claims = jwt.decode(token, **decode_kwargs)
    except JWTError as e:
        logger.warning("[AUTH] JWT decode failed: %s", e)
        raise ValueError("invalid token") from e

    user_id = claims.get("sub")
    if not user_id:
        raise ValueError("invalid token: missing sub")

    return {
        "user_id": user_id,
        "email": claims.get("email"),
    }


async def verify_bearer(authorization: str | None) -> Dict[str, str | None]:
    """
    - Authorization: Bearer <access_token> 헤더에서 토큰을 꺼내서
    - Supabase JWT secret(HS256)으로 검증하고
    - 기본적인 클레임(sub, email)을 반환한다.
    """
    if not authorization:
        raise ValueError("missing Authorization header")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise ValueError("invalid Authorization header")

    return decode_access_token(parts[1].strip())
