# app/routers/favorites.py
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.deps import get_db, get_current_user
from app.services import favorite_service as svc_fav

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


class FavoriteIn(BaseModel):
    content_type: str
    content_id: str


@router.get("")
def list_favorites(
    content_type: Optional[str] = None,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [svc_fav.serialize(f) for f in svc_fav.list_for(db, user["id"], content_type)]


@router.get("/check")
def check_favorite(
    content_type: str,
    content_id: str,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"is_favorited": svc_fav.is_favorited(db, user["id"], content_type, content_id)}


@router.post("", status_code=201)
def add_favorite(body: FavoriteIn, user=Depends(get_current_user), db: Session = Depends(get_db)):
    row = svc_fav.add(db, user["id"], body.content_type, body.content_id)
    db.commit()
    return svc_fav.serialize(row)


@router.post("/toggle")
def toggle_favorite(body: FavoriteIn, user=Depends(get_current_user), db: Session = Depends(get_db)):
    state = svc_fav.toggle(db, user["id"], body.content_type, body.content_id)
    db.commit()
    return {"is_favorited": state}


@router.delete("", status_code=204)
def remove_favorite(
    content_type: str,
    content_id: str,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc_fav.remove(db, user["id"], content_type, content_id)
    db.commit()
    return
