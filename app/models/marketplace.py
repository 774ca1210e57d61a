# app/models/marketplace.py
from sqlalchemy import Column, String, Text, Integer, Boolean, Numeric, DateTime, JSON, func
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base
from app.models.common import new_uuid, utcnow


class MarketplaceListing(Base):
    __tablename__ = "marketplace_listings"

    id = Column(UUID(as_uuid=False), primary_key=True, default=new_uuid)
    user_id = Column(UUID(as_uuid=False), nullable=False, index=True)  # 판매자

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False)
    brand = Column(String(50), nullable=True)
    model = Column(String(100), nullable=True)
    condition = Column(String(20), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="TWD")
    location = Column(String(100), nullable=True)

    # 판매자가 손글씨 메모와 함께 찍은 실물 사진 (사기 방지, 수동 검수)
    verification_image_url = Column(Text, nullable=False)
    additional_images = Column(JSON, nullable=True)  # list[str]

    is_sold = Column(Boolean, nullable=False, default=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_hidden = Column(Boolean, nullable=False, default=False)
    view_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)
