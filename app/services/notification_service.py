# app/services/notification_service.py
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.models.notification import Notification
from app.services import content_ref


def notify(db: Session, user_id: str, type: str, title: str,
           content: Optional[str] = None, ref: Optional[content_ref.ContentRef] = None,
           actor_id: Optional[str] = None) -> Optional[Notification]:
    """
    알림 추가 (커밋은 호출 측에서).
    본인 행동(actor_id == user_id)에는 알림을 만들지 않는다.
    """
    if not user_id or (actor_id is not None and actor_id == user_id):
        return None
    row = Notification(
        user_id=user_id,
        type=type,
        title=title,
        content=content,
        related_type=ref.kind if ref else None,
        related_id=ref.id if ref else None,
    )
    db.add(row)
    return row


def serialize(db: Session, n: Notification) -> Dict:
    ref = content_ref.parse_ref(n.related_type, n.related_id)
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "content": n.content,
        "related_type": n.related_type,
        "related_id": n.related_id,
        "link": content_ref.link_for(db, ref),
        "is_read": bool(n.is_read),
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }
