# app/services/favorite_service.py
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.favorite import Favorite
from app.services import content_ref


def _resolve(db: Session, content_type: str, content_id: str) -> content_ref.ContentRef:
    ref = content_ref.parse_ref(content_type, content_id)
    if ref is None or ref.kind not in content_ref.FAVORITABLE_KINDS:
        raise HTTPException(status_code=400, detail="invalid_content_type")
    row = content_ref.load(db, ref)
    if row is None or row.is_hidden:
        raise HTTPException(status_code=404, detail="content_not_found")
    return ref


def _find(db: Session, user_id: str, content_type: str, content_id: str) -> Optional[Favorite]:
    return (
        db.query(Favorite)
        .filter(
            Favorite.user_id == user_id,
            Favorite.content_type == content_type,
            Favorite.content_id == content_id,
        )
        .first()
    )


def is_favorited(db: Session, user_id: str, content_type: str, content_id: str) -> bool:
    return _find(db, user_id, content_type, content_id) is not None


def add(db: Session, user_id: str, content_type: str, content_id: str) -> Favorite:
    ref = _resolve(db, content_type, content_id)
    row = _find(db, user_id, ref.kind, ref.id)
    if row is None:
        row = Favorite(user_id=user_id, content_type=ref.kind, content_id=ref.id)
        db.add(row)
        db.flush()
    return row


def remove(db: Session, user_id: str, content_type: str, content_id: str) -> bool:
    row = _find(db, user_id, content_type, content_id)
    if row is None:
        return False
    db.delete(row)
    db.flush()
    return True


def toggle(db: Session, user_id: str, content_type: str, content_id: str) -> bool:
    """토글 후 즐겨찾기 상태 반환"""
    if remove(db, user_id, content_type, content_id):
        return False
    add(db, user_id, content_type, content_id)
    return True


def list_for(db: Session, user_id: str, content_type: Optional[str] = None) -> List[Favorite]:
    query = db.query(Favorite).filter(Favorite.user_id == user_id)
    if content_type:
        query = query.filter(Favorite.content_type == content_type)
    return query.order_by(Favorite.created_at.desc()).all()


def serialize(f: Favorite) -> dict:
    return {
        "id": f.id,
        "content_type": f.content_type,
        "content_id": f.content_id,
        "created_at": f.created_at.isoformat() if f.created_at else None,
    }
