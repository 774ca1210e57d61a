# app/routers/forums.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.deps import get_db, get_active_user
from app.models.forum import ForumTopic, ForumReply
from app.services import forum_service as svc_forum
from app.services import profile_service as svc_profile

router = APIRouter(prefix="/api/forums", tags=["forums"])

# ---------- Schemas ----------
class TopicIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category_id: str | None = None
    category: str | None = None
    brand: str | None = None

class ReplyIn(BaseModel):
    content: str = Field(..., min_length=1)

# ---------- 카테고리 ----------
@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    """활성 루트 카테고리 + 정렬된 하위 카테고리 (2단계까지만)"""
    return svc_forum.serialize_tree(svc_forum.active_category_tree(db))

# ---------- 주제 ----------
@router.get("/topics")
def list_topics(
    category_id: Optional[str] = None,
    category: Optional[str] = None,
    q: Optional[str] = None,
    page: int = Query(0, ge=0),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(ForumTopic).filter(ForumTopic.is_hidden.is_(False))
    if category_id:
        query = query.filter(ForumTopic.category_id.in_(svc_forum.category_and_children_ids(db, category_id)))
    elif category:
        query = query.filter(ForumTopic.category == category)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(ForumTopic.title.ilike(like), ForumTopic.content.ilike(like)))

    rows = (
        query.order_by(
            ForumTopic.is_pinned.desc(),
            func.coalesce(ForumTopic.last_reply_at, ForumTopic.created_at).desc(),
        )
        .offset(page * page_size)
        .limit(page_size)
        .all()
    )
    authors = svc_profile.public_profiles_map(db, (t.user_id for t in rows))
    return [svc_forum.serialize_topic(t, authors.get(t.user_id)) for t in rows]


@router.get("/topics/{topic_id}")
def get_topic(topic_id: str, db: Session = Depends(get_db)):
    topic = svc_forum.get_visible_topic(db, topic_id)
    topic.view_count = (topic.view_count or 0) + 1
    db.commit()
    return svc_forum.serialize_topic(topic, svc_profile.get_public_profile(db, topic.user_id))


@router.post("/topics", status_code=201)
def create_topic(
    body: TopicIn,
    user=Depends(get_active_user),
    db: Session = Depends(get_db),
):
    topic = svc_forum.create_topic(
        db, user["id"], body.title, body.content,
        category_id=body.category_id, category=body.category, brand=body.brand,
    )
    db.commit()
    return svc_forum.serialize_topic(topic)

# ---------- 답글 ----------
@router.get("/topics/{topic_id}/replies")
def list_replies(topic_id: str, db: Session = Depends(get_db)):
    svc_forum.get_visible_topic(db, topic_id)
    rows = (
        db.query(ForumReply)
        .filter(ForumReply.topic_id == topic_id, ForumReply.is_hidden.is_(False))
        .order_by(ForumReply.created_at.asc())
        .all()
    )
    authors = svc_profile.public_profiles_map(db, (r.user_id for r in rows))
    return [svc_forum.serialize_reply(r, authors.get(r.user_id)) for r in rows]


@router.post("/topics/{topic_id}/replies", status_code=201)
def create_reply(
    topic_id: str,
    body: ReplyIn,
    user=Depends(get_active_user),
    db: Session = Depends(get_db),
):
    topic = svc_forum.get_visible_topic(db, topic_id)
    reply = svc_forum.add_reply(db, topic, user["id"], body.content)
    db.commit()
    return svc_forum.serialize_reply(reply)
