# app/routers/notifications.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.deps import get_db, get_current_user
from app.models.notification import Notification
from app.services import notification_service as svc_notify

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _own(db: Session, notification_id: str, user_id: str) -> Notification:
    n = db.get(Notification, notification_id)
    if n is None or n.user_id != user_id:
        raise HTTPException(status_code=404, detail="notification_not_found")
    return n


@router.get("")
def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(Notification)
        .filter(Notification.user_id == user["id"])
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )
    return [svc_notify.serialize(db, n) for n in rows]


@router.get("/unread-count")
def unread_count(user=Depends(get_current_user), db: Session = Depends(get_db)):
    count = (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user["id"], Notification.is_read.is_(False))
        .scalar()
    )
    return {"count": count or 0}


@router.post("/read-all", status_code=204)
def mark_all_read(user=Depends(get_current_user), db: Session = Depends(get_db)):
    (
        db.query(Notification)
        .filter(Notification.user_id == user["id"], Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return


@router.post("/{notification_id}/read")
def mark_read(
    notification_id: str,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    n = _own(db, notification_id, user["id"])
    n.is_read = True
    db.commit()
    return svc_notify.serialize(db, n)


@router.delete("/{notification_id}", status_code=204)
def delete_notification(
    notification_id: str,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    db.delete(_own(db, notification_id, user["id"]))
    db.commit()
    return
