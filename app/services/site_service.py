# app/services/site_service.py
# 시스템 설정 / 사이트 문구 / 홈 섹션 / 배너
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.site import SystemSetting, SiteContent, HomepageSection, HeroBanner


def get_setting(db: Session, key: str, default: Optional[str] = None) -> Optional[str]:
    row = db.query(SystemSetting).filter(SystemSetting.setting_key == key).first()
    return row.setting_value if row else default


def setting_enabled(db: Session, key: str, default: bool = True) -> bool:
    """"true"/"false" 문자열 설정값. 행이 없으면 default"""
    value = get_setting(db, key)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def upsert_setting(db: Session, key: str, value: str, updated_by: Optional[str] = None,
                   group: Optional[str] = None, label: Optional[str] = None) -> SystemSetting:
    row = db.query(SystemSetting).filter(SystemSetting.setting_key == key).first()
    if row is None:
        row = SystemSetting(setting_key=key, setting_group=group or "general", label=label)
        db.add(row)
    row.setting_value = value
    row.updated_by = updated_by
    if label is not None:
        row.label = label
    db.flush()
    return row


def settings_map(db: Session) -> Dict[str, str]:
    return {r.setting_key: r.setting_value for r in db.query(SystemSetting).all()}


def serialize_setting(r: SystemSetting) -> Dict:
    return {
        "id": r.id,
        "setting_key": r.setting_key,
        "setting_value": r.setting_value,
        "setting_group": r.setting_group,
        "label": r.label,
        "sort_order": r.sort_order,
        "updated_at": r.updated_at.isoformat() if r.updated_at else None,
    }


def serialize_content(c: SiteContent) -> Dict:
    return {
        "id": c.id,
        "content_key": c.content_key,
        "content_value": c.content_value,
        "content_meta": c.content_meta,
        "page": c.page,
        "sort_order": c.sort_order,
        "is_active": bool(c.is_active),
    }


def serialize_section(s: HomepageSection) -> Dict:
    return {
        "id": s.id,
        "section_key": s.section_key,
        "section_label": s.section_label,
        "sort_order": s.sort_order,
        "is_visible": bool(s.is_visible),
    }


def serialize_banner(b: HeroBanner) -> Dict:
    return {
        "id": b.id,
        "title": b.title,
        "subtitle": b.subtitle,
        "image_url": b.image_url,
        "link_url": b.link_url,
        "sort_order": b.sort_order,
        "is_active": bool(b.is_active),
    }


def active_content(db: Session, page: Optional[str] = None) -> List[SiteContent]:
    query = db.query(SiteContent).filter(SiteContent.is_active.is_(True))
    if page:
        query = query.filter(SiteContent.page == page)
    return query.order_by(SiteContent.sort_order).all()


def visible_sections(db: Session) -> List[HomepageSection]:
    return (
        db.query(HomepageSection)
        .filter(HomepageSection.is_visible.is_(True))
        .order_by(HomepageSection.sort_order)
        .all()
    )


def active_banners(db: Session) -> List[HeroBanner]:
    return (
        db.query(HeroBanner)
        .filter(HeroBanner.is_active.is_(True))
        .order_by(HeroBanner.sort_order)
        .all()
    )
