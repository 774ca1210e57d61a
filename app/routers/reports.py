# app/routers/reports.py
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.deps import get_db, get_current_user
from app.services import report_service as svc_report

router = APIRouter(prefix="/api/reports", tags=["reports"])


class ReportIn(BaseModel):
    content_type: Literal["photo", "comment", "forum_topic", "forum_reply", "listing"]
    content_id: str
    reason: Literal["spam", "harassment", "inappropriate", "copyright", "other"]
    description: str | None = Field(None, max_length=1000)
    reported_user_id: str | None = None


@router.post("", status_code=201)
def create_report(body: ReportIn, user=Depends(get_current_user), db: Session = Depends(get_db)):
    """신고 대상 작성자는 생략하면 콘텐츠에서 찾는다"""
    report = svc_report.create_report(
        db, user["id"], body.content_type, body.content_id, body.reason,
        description=body.description, reported_user_id=body.reported_user_id,
    )
    db.commit()
    return svc_report.serialize_report(report)
