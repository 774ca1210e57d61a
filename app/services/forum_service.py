# app/services/forum_service.py
# 토론 게시판: 2단계 카테고리 트리, 주제/답글
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.common import utcnow
from app.models.forum import ForumCategory, ForumTopic, ForumReply
from app.services import content_ref
from app.services import notification_service as svc_notify

logger = logging.getLogger(__name__)


# ----------------------------
# 카테고리 트리: 루트 | 루트의 자식, 두 종류만 존재
# ----------------------------
@dataclass
class ChildCategory:
    row: ForumCategory


@dataclass
class RootCategory:
    row: ForumCategory
    children: List[ChildCategory] = field(default_factory=list)


def category_dict(c: ForumCategory) -> Dict:
    return {
        "id": c.id,
        "name": c.name,
        "slug": c.slug,
        "description": c.description,
        "icon": c.icon,
        "color": c.color,
        "parent_id": c.parent_id,
        "sort_order": c.sort_order,
        "is_active": bool(c.is_active),
    }


def build_category_tree(rows: List[ForumCategory]) -> List[RootCategory]:
    """
    parent_id 가 없으면 루트, 루트를 부모로 가진 행만 자식.
    부모가 자식이거나(3단계) 목록에 없으면 버린다.
    """
    ordered = sorted(rows, key=lambda c: (c.sort_order or 0, c.name))
    roots: Dict[str, RootCategory] = {}
    for c in ordered:
        if c.parent_id is None:
            roots[c.id] = RootCategory(row=c)
    for c in ordered:
        if c.parent_id is not None and c.parent_id in roots:
            roots[c.parent_id].children.append(ChildCategory(row=c))
    return list(roots.values())


def serialize_tree(tree: List[RootCategory]) -> List[Dict]:
    return [
        {**category_dict(r.row), "children": [category_dict(ch.row) for ch in r.children]}
        for r in tree
    ]


def active_category_tree(db: Session) -> List[RootCategory]:
    rows = db.query(ForumCategory).filter(ForumCategory.is_active.is_(True)).all()
    return build_category_tree(rows)


def validate_parent(db: Session, parent_id: Optional[str], self_id: Optional[str] = None) -> None:
    """하위 카테고리의 부모는 루트여야 한다"""
    if parent_id is None:
        return
    if self_id is not None and parent_id == self_id:
        raise HTTPException(status_code=400, detail="invalid_parent_category")
    parent = db.get(ForumCategory, parent_id)
    if parent is None:
        raise HTTPException(status_code=404, detail="parent_category_not_found")
    if parent.parent_id is not None:
        raise HTTPException(status_code=400, detail="category_depth_exceeded")
    if self_id is not None:
        has_children = db.query(ForumCategory).filter(ForumCategory.parent_id == self_id).first()
        if has_children is not None:
            # 자식이 있는 루트를 다른 루트 밑으로 옮기면 3단계가 된다
            raise HTTPException(status_code=400, detail="category_depth_exceeded")


def category_and_children_ids(db: Session, category_id: str) -> List[str]:
    ids = [category_id]
    ids += [c.id for c in db.query(ForumCategory.id).filter(ForumCategory.parent_id == category_id).all()]
    return ids


# ----------------------------
# 주제 / 답글
# ----------------------------
def serialize_topic(t: ForumTopic, author: Optional[Dict] = None) -> Dict:
    return {
        "id": t.id,
        "user_id": t.user_id,
        "category": t.category,
        "category_id": t.category_id,
        "brand": t.brand,
        "title": t.title,
        "content": t.content,
        "is_pinned": bool(t.is_pinned),
        "is_locked": bool(t.is_locked),
        "reply_count": t.reply_count or 0,
        "view_count": t.view_count or 0,
        "last_reply_at": t.last_reply_at.isoformat() if t.last_reply_at else None,
        "created_at": t.created_at.isoformat() if t.created_at else None,
        "author": author,
    }


def serialize_reply(r: ForumReply, author: Optional[Dict] = None) -> Dict:
    return {
        "id": r.id,
        "topic_id": r.topic_id,
        "user_id": r.user_id,
        "content": r.content,
        "created_at": r.created_at.isoformat() if r.created_at else None,
        "author": author,
    }


def get_visible_topic(db: Session, topic_id: str) -> ForumTopic:
    t = db.get(ForumTopic, topic_id)
    if t is None or t.is_hidden:
        raise HTTPException(status_code=404, detail="topic_not_found")
    return t


def create_topic(db: Session, user_id: str, title: str, content: str,
                 category_id: Optional[str] = None, category: Optional[str] = None,
                 brand: Optional[str] = None) -> ForumTopic:
    if not title.strip() or not content.strip():
        raise HTTPException(status_code=400, detail="title_and_content_required")

    if category_id:
        cat = db.get(ForumCategory, category_id)
        if cat is None or not cat.is_active:
            raise HTTPException(status_code=404, detail="category_not_found")
        # 구버전 텍스트 필드는 참조에서 파생
        category = cat.name
    if not category:
        raise HTTPException(status_code=400, detail="category_required")

    topic = ForumTopic(
        user_id=user_id,
        title=title.strip(),
        content=content.strip(),
        category=category,
        category_id=category_id,
        brand=brand,
    )
    db.add(topic)
    db.flush()
    logger.info("[FORUM] topic created id=%s category=%s", topic.id, category)
    return topic


def add_reply(db: Session, topic: ForumTopic, user_id: str, content: str) -> ForumReply:
    if topic.is_locked:
        raise HTTPException(status_code=409, detail="topic_locked")
    content = (content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="content_required")

    reply = ForumReply(topic_id=topic.id, user_id=user_id, content=content)
    db.add(reply)
    topic.reply_count = (topic.reply_count or 0) + 1
    topic.last_reply_at = utcnow()
    db.flush()

    svc_notify.notify(
        db, topic.user_id, "reply", "您的主題有新回覆",
        content=content[:100], ref=content_ref.TopicRef(topic.id), actor_id=user_id,
    )
    return reply
