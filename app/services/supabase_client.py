# app/services/supabase_client.py
# supabase client 초기화 (Auth / Storage 전용, 테이블은 SQLAlchemy 로 접근)
from functools import lru_cache

from supabase import create_client, Client

from app.config import settings


@lru_cache
def get_supabase() -> Client:
    """anon key 클라이언트 - 이메일/비밀번호 로그인, 회원가입"""
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in .env")
    return create_client(settings.supabase_url, settings.supabase_anon_key)


@lru_cache
def get_service_supabase() -> Client:
    """service role 클라이언트 - 서버에서 Storage 업로드 (RLS 우회)"""
    key = settings.supabase_service_role_key or settings.supabase_anon_key
    return create_client(settings.supabase_url, key)
