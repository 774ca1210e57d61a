# app/services/admin_service.py
# 관리자 대시보드 / 통계 / 사용자 정지 / 정렬 저장
import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.common import utcnow
from app.models.forum import ForumTopic
from app.models.photo import Photo
from app.models.profile import Profile
from app.models.report import Report
from app.services import profile_service as svc_profile

logger = logging.getLogger(__name__)

RECENT_REPORTS = 5
TOP_N = 10


# ----------------------------
# 대시보드
# ----------------------------
def dashboard_stats(db: Session) -> Dict:
    recent = db.query(Report).order_by(Report.created_at.desc()).limit(RECENT_REPORTS).all()
    return {
        "total_users": db.query(func.count(Profile.id)).scalar() or 0,
        "total_photos": db.query(func.count(Photo.id)).scalar() or 0,
        "total_topics": db.query(func.count(ForumTopic.id)).scalar() or 0,
        "pending_reports": db.query(func.count(Report.id)).filter(Report.status == "pending").scalar() or 0,
        "recent_reports": [
            {
                "id": r.id,
                "content_type": r.content_type,
                "reason": r.reason,
                "status": r.status,
                "created_at": r.created_at.isoformat() if r.created_at else None,
            }
            for r in recent
        ],
    }


# ----------------------------
# 통계
# ----------------------------
def daily_counts(timestamps: Iterable, days: int, today=None) -> List[Dict]:
    """
    생성 시각 목록을 날짜별로 집계한다. 비어 있는 날짜는 0.
    반환: [{"date": "YYYY-MM-DD", "count": n}, ...] (오래된 날짜부터)
    """
    today = today or utcnow().date()
    index = pd.date_range(end=pd.Timestamp(today), periods=days, freq="D")

    stamps = [t for t in timestamps if t is not None]
    if stamps:
        # naive 값은 UTC 로 간주
        days_index = pd.to_datetime(stamps, utc=True).tz_convert(None).normalize()
        s = pd.Series(1, index=days_index)
        counts = s.groupby(level=0).sum().reindex(index, fill_value=0)
    else:
        counts = pd.Series(0, index=index)

    return [{"date": d.strftime("%Y-%m-%d"), "count": int(c)} for d, c in counts.items()]


def trends(db: Session, days: int = 30) -> List[Dict]:
    since = utcnow() - timedelta(days=days)
    photos = [r[0] for r in db.query(Photo.created_at).filter(Photo.created_at >= since).all()]
    topics = [r[0] for r in db.query(ForumTopic.created_at).filter(ForumTopic.created_at >= since).all()]

    uploads = daily_counts(photos, days)
    posts = daily_counts(topics, days)
    return [
        {"date": u["date"], "uploads": u["count"], "topics": t["count"]}
        for u, t in zip(uploads, posts)
    ]


def top_photos(db: Session, limit: int = TOP_N) -> List[Dict]:
    rows = db.query(Photo).order_by(Photo.view_count.desc()).limit(limit).all()
    return [
        {"id": p.id, "title": p.title, "view_count": p.view_count or 0, "like_count": p.like_count or 0,
         "average_rating": float(p.average_rating or 0)}
        for p in rows
    ]


def top_uploaders(db: Session, limit: int = TOP_N) -> List[Dict]:
    rows = (
        db.query(Photo.user_id, func.count(Photo.id).label("photo_count"))
        .filter(Photo.is_hidden.is_(False))
        .group_by(Photo.user_id)
        .order_by(func.count(Photo.id).desc())
        .limit(limit)
        .all()
    )
    names = svc_profile.usernames_map(db, (r[0] for r in rows))
    return [{"user_id": uid, "username": names.get(uid), "photo_count": cnt} for uid, cnt in rows]


def analytics(db: Session, days: int = 30) -> Dict:
    return {
        "top_photos": top_photos(db),
        "top_uploaders": top_uploaders(db),
        "trends": trends(db, days),
    }


# ----------------------------
# 사용자 정지
# ----------------------------
def suspend(profile: Profile, days: Optional[int] = None, reason: Optional[str] = None) -> Profile:
    """days 가 없으면 무기한"""
    profile.is_suspended = True
    profile.suspended_until = utcnow() + timedelta(days=days) if days else None
    profile.suspension_reason = reason
    logger.warning("[ADMIN] suspended user_id=%s days=%s", profile.user_id, days)
    return profile


def unsuspend(profile: Profile) -> Profile:
    profile.is_suspended = False
    profile.suspended_until = None
    profile.suspension_reason = None
    logger.info("[ADMIN] unsuspended user_id=%s", profile.user_id)
    return profile


# ----------------------------
# 순서 저장 (행 단위 순차 커밋, 전체 원자성 없음)
# ----------------------------
def save_order(db: Session, model, ordered_ids: Sequence[str], column: str = "sort_order",
               extra: Optional[Dict[str, Dict]] = None) -> int:
    """
    ordered_ids 순서대로 column 에 0..n-1 을 기록한다.
    extra 는 id 별 추가 필드 (예: 홈 섹션 is_visible).
    """
    extra = extra or {}
    updated = 0
    for position, row_id in enumerate(ordered_ids):
        row = db.get(model, row_id)
        if row is None:
            continue
        setattr(row, column, position)
        for key, value in extra.get(row_id, {}).items():
            setattr(row, key, value)
        db.commit()
        updated += 1
    return updated
