import os
import time
import uuid

# 앱 import 전에 설정
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "https://project.supabase.test"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ.pop("SUPABASE_ISSUER", None)
os.environ.pop("SUPABASE_JWT_AUDIENCE", None)

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.main import app
from app.db.base import Base, SessionLocal, create_all, engine
from app.models.profile import Profile, UserRole
from app.services import storage_service

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


def make_token(user_id: str, email: str | None = None) -> str:
    now = int(time.time())
    return jwt.encode(
        {"sub": user_id, "email": email, "aud": "authenticated", "iat": now, "exp": now + 3600},
        JWT_SECRET,
        algorithm="HS256",
    )


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


def jpeg_bytes(width: int = 64, height: int = 48) -> bytes:
    ok, buf = cv2.imencode(".jpg", np.zeros((height, width, 3), dtype=np.uint8))
    assert ok
    return buf.tobytes()


# ----------------------------
# Supabase Storage 가짜 클라이언트
# ----------------------------
class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, data, options=None):
        self.storage.calls.append((self.name, path))
        if self.storage.fail_when and self.storage.fail_when(self.name, path):
            raise RuntimeError("storage unavailable")
        self.storage.objects[(self.name, path)] = data

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.calls = []
        self.objects = {}
        self.fail_when = None

    def from_(self, name):
        return FakeBucket(self, name)


class FakeSupabase:
    def __init__(self):
        self.storage = FakeStorage()


@pytest.fixture(autouse=True)
def _tables():
    create_all()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_supabase(monkeypatch):
    fake = FakeSupabase()
    monkeypatch.setattr(storage_service, "get_service_supabase", lambda: fake)
    return fake


@pytest.fixture
def client(fake_supabase):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user():
    """프로필(+역할)을 만들고 커밋, user_id 반환"""
    def _make(role: str | None = None, **fields) -> str:
        user_id = str(uuid.uuid4())
        with SessionLocal() as s:
            s.add(Profile(user_id=user_id, username=fields.pop("username", f"u_{user_id[:8]}"), **fields))
            if role:
                s.add(UserRole(user_id=user_id, role=role))
            s.commit()
        return user_id
    return _make
