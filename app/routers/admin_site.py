# app/routers/admin_site.py
# 관리자: 토론 카테고리 / 홈 섹션 / 배너 / 사이트 문구 / 시스템 설정
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.deps import get_db, require_admin, require_moderator
from app.models.forum import ForumCategory, ForumTopic
from app.models.site import HomepageSection, HeroBanner, SiteContent, SystemSetting
from app.services import admin_service as svc_admin
from app.services import forum_service as svc_forum
from app.services import site_service as svc_site

router = APIRouter(prefix="/api/admin", tags=["admin-site"])

# ---------- Schemas ----------
class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    parent_id: str | None = None
    sort_order: int = 0
    is_active: bool = True

class CategoryUpdateIn(BaseModel):
    name: str | None = Field(None, max_length=100)
    slug: str | None = Field(None, max_length=100)
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    parent_id: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None

class SectionItemIn(BaseModel):
    id: str
    is_visible: bool = True

class SectionsIn(BaseModel):
    items: List[SectionItemIn]

class BannerIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    subtitle: str | None = None
    image_url: str
    link_url: str | None = None
    sort_order: int = 0
    is_active: bool = True

class BannerUpdateIn(BaseModel):
    title: str | None = Field(None, max_length=200)
    subtitle: str | None = None
    image_url: str | None = None
    link_url: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None

class ContentIn(BaseModel):
    content_key: str = Field(..., min_length=1, max_length=100)
    content_value: str | None = None
    content_meta: Dict[str, Any] | None = None
    page: str | None = None
    sort_order: int = 0
    is_active: bool = True

class ContentUpdateIn(BaseModel):
    content_value: str | None = None
    content_meta: Dict[str, Any] | None = None
    page: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None

class SettingIn(BaseModel):
    setting_value: str
    label: str | None = None

# ---------- Helpers ----------
def _apply(row, changes: dict) -> None:
    for key, value in changes.items():
        setattr(row, key, value)


def _get_or_404(db: Session, model, row_id: str, detail: str):
    row = db.get(model, row_id)
    if row is None:
        raise HTTPException(status_code=404, detail=detail)
    return row

# ---------- 토론 카테고리 ----------
@router.get("/categories")
def list_categories(_=Depends(require_moderator), db: Session = Depends(get_db)):
    """비활성 포함 전체 트리 (3단계 이상은 표시되지 않음)"""
    return svc_forum.serialize_tree(svc_forum.build_category_tree(db.query(ForumCategory).all()))


@router.post("/categories", status_code=201)
def create_category(body: CategoryIn, _=Depends(require_admin), db: Session = Depends(get_db)):
    svc_forum.validate_parent(db, body.parent_id)
    if db.query(ForumCategory.id).filter(ForumCategory.slug == body.slug).first():
        raise HTTPException(status_code=409, detail="slug_taken")
    row = ForumCategory(**body.model_dump())
    db.add(row)
    db.commit()
    return svc_forum.category_dict(row)


@router.patch("/categories/{category_id}")
def update_category(
    category_id: str,
    body: CategoryUpdateIn,
    _=Depends(require_admin),
    db: Session = Depends(get_db),
):
    row = _get_or_404(db, ForumCategory, category_id, "category_not_found")
    changes = body.model_dump(exclude_unset=True)
    if "parent_id" in changes:
        svc_forum.validate_parent(db, changes["parent_id"], self_id=row.id)
    _apply(row, changes)
    db.commit()
    return svc_forum.category_dict(row)


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: str, _=Depends(require_admin), db: Session = Depends(get_db)):
    row = _get_or_404(db, ForumCategory, category_id, "category_not_found")
    if db.query(ForumCategory.id).filter(ForumCategory.parent_id == row.id).first():
        raise HTTPException(status_code=409, detail="category_has_children")
    db.query(ForumTopic).filter(ForumTopic.category_id == row.id).update(
        {ForumTopic.category_id: None}, synchronize_session=False
    )
    db.delete(row)
    db.commit()
    return

# ---------- 홈 섹션 ----------
@router.get("/sections")
def list_sections(_=Depends(require_moderator), db: Session = Depends(get_db)):
    rows = db.query(HomepageSection).order_by(HomepageSection.sort_order).all()
    return [svc_site.serialize_section(s) for s in rows]


@router.put("/sections")
def save_sections(body: SectionsIn, _=Depends(require_admin), db: Session = Depends(get_db)):
    """순서 + 표시 여부 저장 (행 단위 순차 저장)"""
    updated = svc_admin.save_order(
        db, HomepageSection, [i.id for i in body.items],
        extra={i.id: {"is_visible": i.is_visible} for i in body.items},
    )
    return {"updated": updated}

# ---------- 배너 ----------
@router.get("/banners")
def list_banners(_=Depends(require_moderator), db: Session = Depends(get_db)):
    return [svc_site.serialize_banner(b) for b in db.query(HeroBanner).order_by(HeroBanner.sort_order).all()]


@router.post("/banners", status_code=201)
def create_banner(body: BannerIn, _=Depends(require_admin), db: Session = Depends(get_db)):
    row = HeroBanner(**body.model_dump())
    db.add(row)
    db.commit()
    return svc_site.serialize_banner(row)


@router.patch("/banners/{banner_id}")
def update_banner(banner_id: str, body: BannerUpdateIn, _=Depends(require_admin), db: Session = Depends(get_db)):
    row = _get_or_404(db, HeroBanner, banner_id, "banner_not_found")
    _apply(row, body.model_dump(exclude_unset=True))
    db.commit()
    return svc_site.serialize_banner(row)


@router.delete("/banners/{banner_id}", status_code=204)
def delete_banner(banner_id: str, _=Depends(require_admin), db: Session = Depends(get_db)):
    db.delete(_get_or_404(db, HeroBanner, banner_id, "banner_not_found"))
    db.commit()
    return

# ---------- 사이트 문구 ----------
@router.get("/content")
def list_content(_=Depends(require_moderator), db: Session = Depends(get_db)):
    rows = db.query(SiteContent).order_by(SiteContent.page, SiteContent.sort_order).all()
    return [svc_site.serialize_content(c) for c in rows]


@router.post("/content", status_code=201)
def create_content(body: ContentIn, _=Depends(require_admin), db: Session = Depends(get_db)):
    if db.query(SiteContent.id).filter(SiteContent.content_key == body.content_key).first():
        raise HTTPException(status_code=409, detail="content_key_taken")
    row = SiteContent(**body.model_dump())
    db.add(row)
    db.commit()
    return svc_site.serialize_content(row)


@router.patch("/content/{content_id}")
def update_content(content_id: str, body: ContentUpdateIn, _=Depends(require_admin), db: Session = Depends(get_db)):
    row = _get_or_404(db, SiteContent, content_id, "content_not_found")
    _apply(row, body.model_dump(exclude_unset=True))
    db.commit()
    return svc_site.serialize_content(row)


@router.delete("/content/{content_id}", status_code=204)
def delete_content(content_id: str, _=Depends(require_admin), db: Session = Depends(get_db)):
    db.delete(_get_or_404(db, SiteContent, content_id, "content_not_found"))
    db.commit()
    return

# ---------- 시스템 설정 ----------
@router.get("/settings")
def list_settings(_=Depends(require_admin), db: Session = Depends(get_db)):
    rows = db.query(SystemSetting).order_by(SystemSetting.setting_group, SystemSetting.sort_order).all()
    return [svc_site.serialize_setting(r) for r in rows]


@router.put("/settings/{setting_key}")
def update_setting(
    setting_key: str,
    body: SettingIn,
    admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    row = svc_site.upsert_setting(db, setting_key, body.setting_value, updated_by=admin["id"], label=body.label)
    db.commit()
    return svc_site.serialize_setting(row)
