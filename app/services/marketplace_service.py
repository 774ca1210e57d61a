# app/services/marketplace_service.py
# 중고거래: 실물 인증 사진 필수
import logging
import time
import uuid
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.favorite import Favorite
from app.models.marketplace import MarketplaceListing
from app.models.message import Conversation
from app.services import storage_service
from app.services.photo_service import UploadFileData

logger = logging.getLogger(__name__)

CONDITIONS = ("new", "like_new", "good", "fair", "poor")
DEFAULT_CURRENCY = "TWD"
UPDATABLE_FIELDS = ("title", "description", "category", "brand", "model", "condition", "price", "location")


def serialize_listing(l: MarketplaceListing, seller: Optional[Dict] = None) -> Dict:
    return {
        "id": l.id,
        "user_id": l.user_id,
        "title": l.title,
        "description": l.description,
        "category": l.category,
        "brand": l.brand,
        "model": l.model,
        "condition": l.condition,
        "price": float(l.price) if l.price is not None else None,
        "currency": l.currency,
        "location": l.location,
        "verification_image_url": l.verification_image_url,
        "additional_images": l.additional_images or [],
        "is_sold": bool(l.is_sold),
        "is_verified": bool(l.is_verified),
        "view_count": l.view_count or 0,
        "created_at": l.created_at.isoformat() if l.created_at else None,
        "seller": seller,
    }


def listing_summary(l: MarketplaceListing) -> Dict:
    return {"id": l.id, "title": l.title, "price": float(l.price), "currency": l.currency, "is_sold": bool(l.is_sold)}


def get_visible_listing(db: Session, listing_id: str) -> MarketplaceListing:
    l = db.get(MarketplaceListing, listing_id)
    if l is None or l.is_hidden:
        raise HTTPException(status_code=404, detail="listing_not_found")
    return l


def parse_price(value) -> Decimal:
    # nan / inf 거부
    try:
        price = Decimal(str(value))
        if not price.is_finite() or price < 0:
            raise HTTPException(status_code=400, detail="invalid_price")
    except (InvalidOperation, ValueError):
        raise HTTPException(status_code=400, detail="invalid_price")
    return price


def search_listings(
    db: Session,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    condition: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    q: Optional[str] = None,
    page: int = 0,
    page_size: int = 20,
) -> List[MarketplaceListing]:
    query = db.query(MarketplaceListing).filter(
        MarketplaceListing.is_hidden.is_(False),
        MarketplaceListing.is_sold.is_(False),
    )
    if category:
        query = query.filter(MarketplaceListing.category == category)
    if brand:
        query = query.filter(MarketplaceListing.brand == brand)
    if condition:
        query = query.filter(MarketplaceListing.condition == condition)
    if min_price is not None:
        query = query.filter(MarketplaceListing.price >= min_price)
    if max_price is not None:
        query = query.filter(MarketplaceListing.price <= max_price)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            MarketplaceListing.title.ilike(like),
            MarketplaceListing.brand.ilike(like),
            MarketplaceListing.model.ilike(like),
        ))
    return (
        query.order_by(MarketplaceListing.created_at.desc())
        .offset(page * page_size)
        .limit(page_size)
        .all()
    )


def _image_path(user_id: str, suffix: str = "") -> str:
    return f"{user_id}/{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}{suffix}.jpg"


def create_listing(
    db: Session,
    user_id: str,
    title: str,
    description: str,
    category: str,
    condition: str,
    price,
    verification_image: Optional[UploadFileData],
    additional_images: Optional[List[UploadFileData]] = None,
    brand: Optional[str] = None,
    model: Optional[str] = None,
    location: Optional[str] = None,
    currency: Optional[str] = None,
) -> MarketplaceListing:
    if verification_image is None or not verification_image.data:
        raise HTTPException(status_code=400, detail="verification_image_required")
    if not title.strip() or not description.strip():
        raise HTTPException(status_code=400, detail="title_and_description_required")
    if condition not in CONDITIONS:
        raise HTTPException(status_code=400, detail="invalid_condition")
    amount = parse_price(price)

    images = [verification_image] + list(additional_images or [])
    for f in images:
        if not (f.content_type or "").startswith("image/"):
            raise HTTPException(status_code=400, detail="invalid_file_type")

    try:
        verification_url = storage_service.upload_verification(
            _image_path(user_id, "_verify"), verification_image.data,
            content_type=verification_image.content_type,
        )
        extra_urls = [
            storage_service.upload_listing_image(_image_path(user_id), f.data, content_type=f.content_type)
            for f in additional_images or []
        ]
    except storage_service.StorageError:
        raise HTTPException(status_code=502, detail="upload_failed")

    listing = MarketplaceListing(
        user_id=user_id,
        title=title.strip(),
        description=description.strip(),
        category=category,
        brand=brand,
        model=model,
        condition=condition,
        price=amount,
        currency=currency or DEFAULT_CURRENCY,
        location=location,
        verification_image_url=verification_url,
        additional_images=extra_urls,
    )
    db.add(listing)
    db.flush()
    logger.info("[MARKET] listing created id=%s user_id=%s", listing.id, user_id)
    return listing


def _ensure_owner(listing: MarketplaceListing, user_id: str) -> None:
    if listing.user_id != user_id:
        raise HTTPException(status_code=403, detail="forbidden")


def update_listing(db: Session, listing: MarketplaceListing, user_id: str, changes: Dict) -> MarketplaceListing:
    _ensure_owner(listing, user_id)
    for key, value in changes.items():
        if key not in UPDATABLE_FIELDS or value is None:
            continue
        if key == "price":
            value = parse_price(value)
        if key == "condition" and value not in CONDITIONS:
            raise HTTPException(status_code=400, detail="invalid_condition")
        setattr(listing, key, value)
    db.flush()
    return listing


def mark_sold(db: Session, listing: MarketplaceListing, user_id: str, sold: bool = True) -> MarketplaceListing:
    _ensure_owner(listing, user_id)
    listing.is_sold = sold
    db.flush()
    return listing


def delete_listing(db: Session, listing: MarketplaceListing, user_id: str) -> None:
    _ensure_owner(listing, user_id)
    lid = listing.id
    db.query(Conversation).filter(Conversation.listing_id == lid).update(
        {Conversation.listing_id: None}, synchronize_session=False
    )
    db.query(Favorite).filter(Favorite.content_type == "listing", Favorite.content_id == lid).delete(synchronize_session=False)
    db.delete(listing)
    logger.info("[MARKET] listing deleted id=%s", lid)
