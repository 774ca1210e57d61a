# app/services/messaging_service.py
# 1:1 메시지 (대화방은 참가자 2명 + 선택적으로 매물 1개)
import logging
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from app.models.common import utcnow
from app.models.marketplace import MarketplaceListing
from app.models.message import Conversation, Message
from app.models.profile import Profile
from app.services import content_ref
from app.services import notification_service as svc_notify
from app.services import profile_service as svc_profile
from app.services.marketplace_service import listing_summary

logger = logging.getLogger(__name__)


def serialize_message(m: Message) -> Dict:
    return {
        "id": m.id,
        "conversation_id": m.conversation_id,
        "sender_id": m.sender_id,
        "content": m.content,
        "is_read": bool(m.is_read),
        "created_at": m.created_at.isoformat() if m.created_at else None,
    }


def get_participant_conversation(db: Session, conversation_id: str, user_id: str) -> Conversation:
    conv = db.get(Conversation, conversation_id)
    if conv is None:
        raise HTTPException(status_code=404, detail="conversation_not_found")
    if not conv.has_participant(user_id):
        raise HTTPException(status_code=403, detail="forbidden")
    return conv


def get_or_create_conversation(db: Session, user_id: str, other_user_id: str,
                               listing_id: Optional[str] = None) -> Conversation:
    if other_user_id == user_id:
        raise HTTPException(status_code=400, detail="cannot_message_self")
    if db.query(Profile.id).filter(Profile.user_id == other_user_id).first() is None:
        raise HTTPException(status_code=404, detail="user_not_found")
    if listing_id and db.get(MarketplaceListing, listing_id) is None:
        raise HTTPException(status_code=404, detail="listing_not_found")

    pair = or_(
        and_(Conversation.participant1_id == user_id, Conversation.participant2_id == other_user_id),
        and_(Conversation.participant1_id == other_user_id, Conversation.participant2_id == user_id),
    )
    query = db.query(Conversation).filter(pair)
    if listing_id:
        query = query.filter(Conversation.listing_id == listing_id)
    else:
        query = query.filter(Conversation.listing_id.is_(None))
    conv = query.first()
    if conv is not None:
        return conv

    conv = Conversation(participant1_id=user_id, participant2_id=other_user_id, listing_id=listing_id)
    db.add(conv)
    db.flush()
    logger.info("[MSG] conversation created id=%s", conv.id)
    return conv


def list_conversations(db: Session, user_id: str) -> List[Dict]:
    convs = (
        db.query(Conversation)
        .filter(or_(Conversation.participant1_id == user_id, Conversation.participant2_id == user_id))
        .order_by(Conversation.last_message_at.desc().nullslast(), Conversation.created_at.desc())
        .all()
    )
    if not convs:
        return []

    ids = [c.id for c in convs]
    profiles = svc_profile.public_profiles_map(db, (c.other_participant(user_id) for c in convs))

    unread = dict(
        db.query(Message.conversation_id, func.count(Message.id))
        .filter(Message.conversation_id.in_(ids), Message.sender_id != user_id, Message.is_read.is_(False))
        .group_by(Message.conversation_id)
        .all()
    )

    listing_ids = [c.listing_id for c in convs if c.listing_id]
    listings = {}
    if listing_ids:
        listings = {
            l.id: listing_summary(l)
            for l in db.query(MarketplaceListing).filter(MarketplaceListing.id.in_(listing_ids)).all()
        }

    out = []
    for c in convs:
        last = (
            db.query(Message)
            .filter(Message.conversation_id == c.id)
            .order_by(Message.created_at.desc())
            .first()
        )
        out.append({
            "id": c.id,
            "other_user": profiles.get(c.other_participant(user_id)),
            "listing": listings.get(c.listing_id),
            "last_message": serialize_message(last) if last else None,
            "last_message_at": c.last_message_at.isoformat() if c.last_message_at else None,
            "unread_count": unread.get(c.id, 0),
        })
    return out


def read_messages(db: Session, conv: Conversation, user_id: str) -> List[Message]:
    """오름차순으로 반환하고 상대방 메시지를 읽음 처리"""
    rows = (
        db.query(Message)
        .filter(Message.conversation_id == conv.id)
        .order_by(Message.created_at.asc())
        .all()
    )
    for m in rows:
        if m.sender_id != user_id and not m.is_read:
            m.is_read = True
    db.flush()
    return rows


def send_message(db: Session, conv: Conversation, sender_id: str, content: str) -> Message:
    content = (content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="content_required")

    msg = Message(conversation_id=conv.id, sender_id=sender_id, content=content)
    db.add(msg)
    conv.last_message_at = utcnow()
    db.flush()

    svc_notify.notify(
        db, conv.other_participant(sender_id), "message", "您有一則新訊息",
        content=content[:100], ref=content_ref.ConversationRef(conv.id), actor_id=sender_id,
    )
    return msg
