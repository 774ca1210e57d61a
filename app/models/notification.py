# app/models/notification.py
from sqlalchemy import Column, String, Text, Boolean, DateTime, Index, func
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base
from app.models.common import new_uuid, utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    user_id = Column(UUID(as_uuid=False), nullable=False)
    type = Column(String(20), nullable=False)  # comment|rating|message|reply|warning
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=True)

    # 다형 참조 (related_type, related_id) -> app.services.content_ref 로 해석
    related_type = Column(String(20), nullable=True)
    related_id = Column(UUID(as_uuid=False), nullable=True)

    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        Index("ix_notifications_user_id_created_at", "user_id", "created_at"),
    )
