# app/models/report.py
from sqlalchemy import Column, String, Text, DateTime, Index, func
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base
from app.models.common import new_uuid, utcnow


class Report(Base):
    __tablename__ = "reports"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)

    # 다형 참조: photo|comment|forum_topic|forum_reply|listing
    content_type = Column(String(20), nullable=False)
    content_id = Column(UUID(as_uuid=False), nullable=False)

    reporter_id = Column(UUID(as_uuid=False), nullable=False)
    reported_user_id = Column(UUID(as_uuid=False), nullable=True)
    reason = Column(String(20), nullable=False)  # spam|harassment|inappropriate|copyright|other
    description = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="pending")  # pending|resolved|dismissed
    resolution_note = Column(Text, nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolved_by = Column(UUID(as_uuid=False), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        Index("ix_reports_status_created_at", "status", "created_at"),
    )
