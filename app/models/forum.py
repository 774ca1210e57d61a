# app/models/forum.py
# 토론 게시판: 카테고리(2단계) / 주제 / 답글
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, Index, func
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base
from app.models.common import new_uuid, utcnow


class ForumCategory(Base):
    __tablename__ = "forum_categories"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    # NULL = 루트, 값이 있으면 루트의 하위 카테고리 (2단계까지만)
    parent_id = Column(UUID(as_uuid=False), ForeignKey("forum_categories.id"), nullable=True)
    name = Column(String(50), nullable=False)
    slug = Column(String(60), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    icon = Column(String(50), nullable=True)
    color = Column(String(20), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())


class ForumTopic(Base):
    __tablename__ = "forum_topics"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    user_id = Column(UUID(as_uuid=False), nullable=False, index=True)

    # category(텍스트)는 구버전 필드, category_id 가 정규화된 참조
    category = Column(String(50), nullable=False)
    category_id = Column(UUID(as_uuid=False), ForeignKey("forum_categories.id"), nullable=True, index=True)
    brand = Column(String(50), nullable=True)

    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)

    is_pinned = Column(Boolean, nullable=False, default=False)
    is_locked = Column(Boolean, nullable=False, default=False)
    is_hidden = Column(Boolean, nullable=False, default=False)

    reply_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    last_reply_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    __table_args__ = (
        Index("ix_forum_topics_pinned_created", "is_pinned", "created_at"),
    )


class ForumReply(Base):
    __tablename__ = "forum_replies"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    topic_id = Column(UUID(as_uuid=False), ForeignKey("forum_topics.id"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=False), nullable=False)
    content = Column(Text, nullable=False)
    is_hidden = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)
