# app/routers/messages.py
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.deps import get_db, get_current_user, get_active_user
from app.services import messaging_service as svc_msg

router = APIRouter(prefix="/api/conversations", tags=["messages"])

# ---------- Schemas ----------
class ConversationIn(BaseModel):
    other_user_id: str
    listing_id: str | None = None

class MessageIn(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

# ---------- Endpoints ----------
@router.post("")
def open_conversation(
    body: ConversationIn,
    user=Depends(get_active_user),
    db: Session = Depends(get_db),
):
    """두 사람(+매물) 조합의 대화방이 있으면 그대로, 없으면 생성"""
    conv = svc_msg.get_or_create_conversation(db, user["id"], body.other_user_id, body.listing_id)
    db.commit()
    return {
        "id": conv.id,
        "participant1_id": conv.participant1_id,
        "participant2_id": conv.participant2_id,
        "listing_id": conv.listing_id,
    }


@router.get("")
def list_conversations(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return svc_msg.list_conversations(db, user["id"])


@router.get("/{conversation_id}/messages")
def list_messages(
    conversation_id: str,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    conv = svc_msg.get_participant_conversation(db, conversation_id, user["id"])
    rows = svc_msg.read_messages(db, conv, user["id"])
    db.commit()
    return [svc_msg.serialize_message(m) for m in rows]


@router.post("/{conversation_id}/messages", status_code=201)
def send_message(
    conversation_id: str,
    body: MessageIn,
    user=Depends(get_active_user),
    db: Session = Depends(get_db),
):
    conv = svc_msg.get_participant_conversation(db, conversation_id, user["id"])
    msg = svc_msg.send_message(db, conv, user["id"], body.content)
    db.commit()
    return svc_msg.serialize_message(msg)
