# app/models/favorite.py
from sqlalchemy import Column, String, DateTime, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base
from app.models.common import new_uuid, utcnow


class Favorite(Base):
    __tablename__ = "favorites"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    user_id = Column(UUID(as_uuid=False), nullable=False, index=True)
    content_type = Column(String(20), nullable=False)  # photo|listing
    content_id = Column(UUID(as_uuid=False), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "content_type", "content_id", name="uq_favorites_user_content"),
    )
