# app/services/report_service.py
# 신고 접수 / 운영자 처리 (resolve, dismiss, hide, warn)
import logging
from datetime import timedelta
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.common import utcnow
from app.models.profile import Profile
from app.models.report import Report
from app.services import content_ref
from app.services import notification_service as svc_notify
from app.services import profile_service as svc_profile

logger = logging.getLogger(__name__)

REASONS = ("spam", "harassment", "inappropriate", "copyright", "other")
ACTIONS = ("resolve", "dismiss", "hide", "warn")

# 경고 누적 시 자동 정지
WARNING_SUSPEND_THRESHOLD = 3
WARNING_SUSPEND_DAYS = 7

DEFAULT_NOTES = {
    "resolve": "已處理",
    "dismiss": "檢舉不成立",
    "hide": "內容已隱藏",
    "warn": "已對用戶發出警告",
}
WARNING_TITLE = "您收到一則警告"
WARNING_CONTENT = "您的內容因違反社群規範而收到警告，請注意遵守規則。"


def serialize_report(r: Report, usernames: Optional[Dict[str, str]] = None) -> Dict:
    usernames = usernames or {}
    return {
        "id": r.id,
        "content_type": r.content_type,
        "content_id": r.content_id,
        "reporter_id": r.reporter_id,
        "reporter_username": usernames.get(r.reporter_id),
        "reported_user_id": r.reported_user_id,
        "reported_username": usernames.get(r.reported_user_id),
        "reason": r.reason,
        "description": r.description,
        "status": r.status,
        "resolution_note": r.resolution_note,
        "resolved_at": r.resolved_at.isoformat() if r.resolved_at else None,
        "resolved_by": r.resolved_by,
        "created_at": r.created_at.isoformat() if r.created_at else None,
    }


# ----------------------------
# 신고 접수
# ----------------------------
def create_report(db: Session, reporter_id: str, content_type: str, content_id: str, reason: str,
                  description: Optional[str] = None, reported_user_id: Optional[str] = None) -> Report:
    if reason not in REASONS:
        raise HTTPException(status_code=400, detail="invalid_reason")
    ref = content_ref.parse_ref(content_type, content_id)
    if ref is None or ref.kind not in content_ref.REPORTABLE_KINDS:
        raise HTTPException(status_code=400, detail="invalid_content_type")
    if content_ref.load(db, ref) is None:
        raise HTTPException(status_code=404, detail="content_not_found")

    report = Report(
        content_type=ref.kind,
        content_id=ref.id,
        reporter_id=reporter_id,
        reported_user_id=reported_user_id or content_ref.owner_id(db, ref),
        reason=reason,
        description=description,
    )
    db.add(report)
    db.flush()
    logger.info("[REPORT] created id=%s %s/%s reason=%s", report.id, ref.kind, ref.id, reason)
    return report


def list_reports(db: Session, status: Optional[str] = None, content_type: Optional[str] = None,
                 limit: int = 100) -> List[Dict]:
    query = db.query(Report)
    if status and status != "all":
        query = query.filter(Report.status == status)
    if content_type and content_type != "all":
        query = query.filter(Report.content_type == content_type)
    rows = query.order_by(Report.created_at.desc()).limit(limit).all()

    usernames = svc_profile.usernames_map(
        db, [r.reporter_id for r in rows] + [r.reported_user_id for r in rows]
    )
    return [serialize_report(r, usernames) for r in rows]


# ----------------------------
# 운영자 처리
# ----------------------------
def warn_user(db: Session, user_id: str, note: Optional[str] = None,
              ref: Optional[content_ref.ContentRef] = None) -> Optional[Profile]:
    """경고 1회 추가, 누적 3회 이상이면 7일 정지"""
    prof = db.query(Profile).filter(Profile.user_id == user_id).first()
    if prof is None:
        return None

    prof.warning_count = (prof.warning_count or 0) + 1
    svc_notify.notify(db, user_id, "warning", WARNING_TITLE, content=note or WARNING_CONTENT, ref=ref)

    if prof.warning_count >= WARNING_SUSPEND_THRESHOLD:
        prof.is_suspended = True
        prof.suspended_until = utcnow() + timedelta(days=WARNING_SUSPEND_DAYS)
        prof.suspension_reason = f"累計 {prof.warning_count} 次警告，自動停權 {WARNING_SUSPEND_DAYS} 天"
        logger.warning("[MODERATION] auto-suspended user_id=%s warnings=%s", user_id, prof.warning_count)
    return prof


def apply_action(db: Session, report_id: str, action: str, moderator_id: str,
                 note: Optional[str] = None) -> Report:
    if action not in ACTIONS:
        raise HTTPException(status_code=400, detail="invalid_action")

    report = db.get(Report, report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="report_not_found")
    if report.status != "pending":
        raise HTTPException(status_code=409, detail="report_not_pending")

    ref = content_ref.parse_ref(report.content_type, report.content_id)

    if action == "warn" and report.reported_user_id:
        warn_user(db, report.reported_user_id, note=note, ref=ref)
    elif action == "hide" and ref is not None:
        content_ref.set_hidden(db, ref, True)

    report.status = "dismissed" if action == "dismiss" else "resolved"
    report.resolution_note = note or DEFAULT_NOTES[action]
    report.resolved_at = utcnow()
    report.resolved_by = moderator_id
    db.flush()

    logger.info("[MODERATION] report=%s action=%s by=%s", report.id, action, moderator_id)
    return report
