# app/services/content_ref.py
# 다형 참조 (content_type/related_type, id) 문자열 쌍을 타입으로 해석한다.
# 알림, 신고, 즐겨찾기가 같은 해석기를 공유한다.
from dataclasses import dataclass
from typing import Optional, Type, Union

from sqlalchemy.orm import Session

from app.models.photo import Photo, Comment
from app.models.forum import ForumTopic, ForumReply
from app.models.marketplace import MarketplaceListing
from app.models.message import Conversation


@dataclass(frozen=True)
class PhotoRef:
    id: str
    kind = "photo"


@dataclass(frozen=True)
class CommentRef:
    id: str
    kind = "comment"


@dataclass(frozen=True)
class TopicRef:
    id: str
    kind = "forum_topic"


@dataclass(frozen=True)
class ReplyRef:
    id: str
    kind = "forum_reply"


@dataclass(frozen=True)
class ListingRef:
    id: str
    kind = "listing"


@dataclass(frozen=True)
class ConversationRef:
    id: str
    kind = "message"


ContentRef = Union[PhotoRef, CommentRef, TopicRef, ReplyRef, ListingRef, ConversationRef]

_REF_TYPES = {
    cls.kind: cls
    for cls in (PhotoRef, CommentRef, TopicRef, ReplyRef, ListingRef, ConversationRef)
}

# 숨김 처리 / 작성자 조회용 테이블 매핑
_MODELS: dict = {
    PhotoRef: Photo,
    CommentRef: Comment,
    TopicRef: ForumTopic,
    ReplyRef: ForumReply,
    ListingRef: MarketplaceListing,
    ConversationRef: Conversation,
}

# 신고 가능한 콘텐츠 종류
REPORTABLE_KINDS = ("photo", "comment", "forum_topic", "forum_reply", "listing")
# 즐겨찾기 가능한 콘텐츠 종류
FAVORITABLE_KINDS = ("photo", "listing")


def parse_ref(kind: Optional[str], ref_id: Optional[str]) -> Optional[ContentRef]:
    """알 수 없는 종류이거나 id 가 없으면 None"""
    if not kind or not ref_id:
        return None
    cls = _REF_TYPES.get(kind)
    if cls is None:
        return None
    return cls(str(ref_id))


def model_for(ref: ContentRef) -> Type:
    return _MODELS[type(ref)]


def load(db: Session, ref: ContentRef):
    return db.get(model_for(ref), ref.id)


def owner_id(db: Session, ref: ContentRef) -> Optional[str]:
    row = load(db, ref)
    if row is None:
        return None
    if isinstance(ref, ConversationRef):
        return None
    return row.user_id


def set_hidden(db: Session, ref: ContentRef, hidden: bool = True) -> bool:
    """is_hidden 을 가진 콘텐츠만 숨길 수 있다"""
    model = model_for(ref)
    if not hasattr(model, "is_hidden"):
        raise ValueError(f"{ref.kind} cannot be hidden")
    row = db.get(model, ref.id)
    if row is None:
        return False
    row.is_hidden = hidden
    return True


def link_for(db: Session, ref: Optional[ContentRef]) -> Optional[str]:
    """프론트 라우트 경로로 변환"""
    if ref is None:
        return None
    if isinstance(ref, PhotoRef):
        return f"/gallery/{ref.id}"
    if isinstance(ref, ConversationRef):
        return f"/messages/{ref.id}"
    if isinstance(ref, TopicRef):
        return f"/forums/topic/{ref.id}"
    if isinstance(ref, ListingRef):
        return f"/marketplace/{ref.id}"
    if isinstance(ref, CommentRef):
        comment = db.get(Comment, ref.id)
        return f"/gallery/{comment.photo_id}" if comment else None
    if isinstance(ref, ReplyRef):
        reply = db.get(ForumReply, ref.id)
        return f"/forums/topic/{reply.topic_id}" if reply else None
    return None
