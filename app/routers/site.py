# app/routers/site.py
# 로그인 없이 읽는 사이트 설정 / 문구 / 홈 섹션 / 배너
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.deps import get_db
from app.services import site_service as svc_site

router = APIRouter(prefix="/api/site", tags=["site"])


@router.get("/settings")
def public_settings(db: Session = Depends(get_db)):
    return svc_site.settings_map(db)


@router.get("/content")
def public_content(page: Optional[str] = None, db: Session = Depends(get_db)):
    return [svc_site.serialize_content(c) for c in svc_site.active_content(db, page)]


@router.get("/sections")
def public_sections(db: Session = Depends(get_db)):
    return [svc_site.serialize_section(s) for s in svc_site.visible_sections(db)]


@router.get("/banners")
def public_banners(db: Session = Depends(get_db)):
    return [svc_site.serialize_banner(b) for b in svc_site.active_banners(db)]
