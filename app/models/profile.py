# app/models/profile.py
# supabase auth.users를 보조하는 프로필 / 권한 테이블
from sqlalchemy import Column, String, Text, Integer, Boolean, Date, DateTime, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base
from app.models.common import new_uuid, utcnow


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    user_id = Column(UUID(as_uuid=False), nullable=False, unique=True, index=True)  # = auth.users.id
    username = Column(String(50), nullable=False, unique=True)
    display_name = Column(String(100), nullable=True)
    avatar_url = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    phone = Column(String(30), nullable=True)

    is_vip = Column(Boolean, nullable=False, default=False)
    is_verified = Column(Boolean, nullable=False, default=False)

    # 모더레이션 상태
    warning_count = Column(Integer, nullable=False, default=0)
    is_suspended = Column(Boolean, nullable=False, default=False)
    suspended_until = Column(DateTime(timezone=True), nullable=True)
    suspension_reason = Column(Text, nullable=True)

    # 업로드 한도 카운터 (last_upload_date 기준 일 단위 리셋)
    daily_upload_count = Column(Integer, nullable=False, default=0)
    last_upload_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    user_id = Column(UUID(as_uuid=False), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="user")  # admin|moderator|user
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_user_roles_user_id"),
    )
