# app/routers/marketplace.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.deps import get_db, get_active_user, get_current_user
from app.services import marketplace_service as svc_market
from app.services import profile_service as svc_profile
from app.services.photo_service import UploadFileData

router = APIRouter(prefix="/api/marketplace", tags=["marketplace"])

# ---------- Schemas ----------
class ListingUpdateIn(BaseModel):
    title: str | None = Field(None, max_length=200)
    description: str | None = None
    category: str | None = None
    brand: str | None = None
    model: str | None = None
    condition: str | None = None
    price: float | None = Field(None, ge=0)
    location: str | None = None

class SoldIn(BaseModel):
    is_sold: bool = True

# ---------- Helpers ----------
async def _file_data(f: UploadFile) -> UploadFileData:
    return UploadFileData(filename=f.filename or "", content_type=f.content_type or "", data=await f.read())

# ---------- Endpoints ----------
@router.get("/listings")
def list_listings(
    category: Optional[str] = None,
    brand: Optional[str] = None,
    condition: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    q: Optional[str] = None,
    page: int = Query(0, ge=0),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    rows = svc_market.search_listings(
        db, category=category, brand=brand, condition=condition,
        min_price=min_price, max_price=max_price, q=q, page=page, page_size=page_size,
    )
    sellers = svc_profile.public_profiles_map(db, (l.user_id for l in rows))
    return [svc_market.serialize_listing(l, sellers.get(l.user_id)) for l in rows]


@router.get("/listings/{listing_id}")
def get_listing(listing_id: str, db: Session = Depends(get_db)):
    listing = svc_market.get_visible_listing(db, listing_id)
    listing.view_count = (listing.view_count or 0) + 1
    db.commit()
    return svc_market.serialize_listing(listing, svc_profile.get_public_profile(db, listing.user_id))


@router.post("/listings", status_code=201)
async def create_listing(
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    condition: str = Form(...),
    price: float = Form(...),
    brand: Optional[str] = Form(None),
    model: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    currency: Optional[str] = Form(None),
    verification_image: UploadFile = File(...),
    images: List[UploadFile] = File(default=[]),
    user=Depends(get_active_user),
    db: Session = Depends(get_db),
):
    """판매자 실물 인증 사진(verification_image)은 필수"""
    listing = svc_market.create_listing(
        db,
        user["id"],
        title=title,
        description=description,
        category=category,
        condition=condition,
        price=price,
        verification_image=await _file_data(verification_image),
        additional_images=[await _file_data(f) for f in images],
        brand=brand,
        model=model,
        location=location,
        currency=currency,
    )
    db.commit()
    return svc_market.serialize_listing(listing)


@router.patch("/listings/{listing_id}")
def update_listing(
    listing_id: str,
    body: ListingUpdateIn,
    user=Depends(get_active_user),
    db: Session = Depends(get_db),
):
    listing = svc_market.get_visible_listing(db, listing_id)
    svc_market.update_listing(db, listing, user["id"], body.model_dump(exclude_none=True))
    db.commit()
    return svc_market.serialize_listing(listing)


@router.post("/listings/{listing_id}/sold")
def mark_sold(
    listing_id: str,
    body: SoldIn,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    listing = svc_market.get_visible_listing(db, listing_id)
    svc_market.mark_sold(db, listing, user["id"], body.is_sold)
    db.commit()
    return svc_market.serialize_listing(listing)


@router.delete("/listings/{listing_id}", status_code=204)
def delete_listing(
    listing_id: str,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    listing = svc_market.get_visible_listing(db, listing_id)
    svc_market.delete_listing(db, listing, user["id"])
    db.commit()
    return
