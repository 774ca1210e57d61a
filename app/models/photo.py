# app/models/photo.py
# 갤러리: 사진 / 평점 / 댓글 / 태그
from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    Boolean,
    Numeric,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
    JSON,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base
from app.models.common import new_uuid, utcnow


class Photo(Base):
    __tablename__ = "photos"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    user_id = Column(UUID(as_uuid=False), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=False)
    thumbnail_url = Column(Text, nullable=True)

    # 촬영 장비
    category = Column(String(50), nullable=False)  # phone|camera 또는 주제 카테고리
    brand = Column(String(50), nullable=True)
    phone_model = Column(String(100), nullable=True)
    camera_body = Column(String(100), nullable=True)
    lens = Column(String(100), nullable=True)
    exif_data = Column(JSON, nullable=True)

    # 카운터
    like_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    average_rating = Column(Numeric(3, 2), nullable=False, default=0)
    rating_count = Column(Integer, nullable=False, default=0)

    is_featured = Column(Boolean, nullable=False, default=False)
    featured_order = Column(Integer, nullable=True)
    is_hidden = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    __table_args__ = (
        Index("ix_photos_category_brand", "category", "brand"),
    )


class PhotoRating(Base):
    __tablename__ = "photo_ratings"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    photo_id = Column(UUID(as_uuid=False), ForeignKey("photos.id"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=False), nullable=False)
    rating = Column(Integer, nullable=False)  # 1~5

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("photo_id", "user_id", name="uq_photo_ratings_photo_user"),
    )


class Comment(Base):
    __tablename__ = "comments"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    photo_id = Column(UUID(as_uuid=False), ForeignKey("photos.id"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=False), nullable=False)
    # NULL = 최상위 댓글, 값이 있으면 최상위 댓글에 대한 답글
    parent_id = Column(UUID(as_uuid=False), ForeignKey("comments.id"), nullable=True)
    content = Column(Text, nullable=False)
    is_hidden = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    name = Column(String(50), nullable=False, unique=True)
    slug = Column(String(60), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())


class ContentTag(Base):
    __tablename__ = "content_tags"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    tag_id = Column(UUID(as_uuid=False), ForeignKey("tags.id"), nullable=False)
    content_type = Column(String(20), nullable=False)  # photo
    content_id = Column(UUID(as_uuid=False), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("tag_id", "content_type", "content_id", name="uq_content_tags"),
    )
