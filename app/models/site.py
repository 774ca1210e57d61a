# app/models/site.py
# 관리자 페이지에서 편집하는 사이트 설정 / 문구 / 홈 섹션 / 배너
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, JSON, func
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base
from app.models.common import new_uuid, utcnow


class SystemSetting(Base):
    __tablename__ = "system_settings"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    setting_key = Column(String(100), nullable=False, unique=True)
    setting_value = Column(Text, nullable=False, default="")  # 문자열 저장, "true"/"false"/숫자 문자열
    setting_group = Column(String(50), nullable=False, default="general")
    label = Column(String(100), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)
    updated_by = Column(UUID(as_uuid=False), nullable=True)


class SiteContent(Base):
    __tablename__ = "site_content"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    content_key = Column(String(100), nullable=False, unique=True)
    content_value = Column(Text, nullable=True)
    content_meta = Column(JSON, nullable=True)
    page = Column(String(50), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)


class HomepageSection(Base):
    __tablename__ = "homepage_sections"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    section_key = Column(String(50), nullable=False, unique=True)
    section_label = Column(String(100), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)

    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)


class HeroBanner(Base):
    __tablename__ = "hero_banners"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    title = Column(String(200), nullable=False)
    subtitle = Column(Text, nullable=True)
    image_url = Column(Text, nullable=False)
    link_url = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
