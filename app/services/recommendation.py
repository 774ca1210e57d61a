# app/services/recommendation.py
# "더 보기" 추천: 같은 브랜드 / 카테고리 사진을 가져와서 점수순 정렬
from typing import List, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.photo import Photo

SIMILAR_LIMIT = 12
BRAND_WEIGHT = 2
CATEGORY_WEIGHT = 1


def similarity_score(base: Photo, candidate: Photo) -> int:
    score = 0
    if base.brand and candidate.brand == base.brand:
        score += BRAND_WEIGHT
    if base.category and candidate.category == base.category:
        score += CATEGORY_WEIGHT
    return score


def rank_similar(base: Photo, candidates: Sequence[Photo]) -> List[Photo]:
    """점수 내림차순, 동점이면 원래 순서 유지 (sorted 는 stable)"""
    return sorted(candidates, key=lambda p: similarity_score(base, p), reverse=True)


def _visible(db: Session, base: Photo):
    return db.query(Photo).filter(Photo.is_hidden.is_(False), Photo.id != base.id)


def similar_photos(db: Session, base: Photo, limit: int = SIMILAR_LIMIT) -> List[Photo]:
    conds = [Photo.category == base.category]
    if base.brand:
        conds.append(Photo.brand == base.brand)

    candidates = (
        _visible(db, base)
        .filter(or_(*conds))
        .order_by(Photo.average_rating.desc(), Photo.created_at.desc())
        .limit(limit)
        .all()
    )
    if candidates:
        return rank_similar(base, candidates)

    # 후보가 없으면 전체 평점 상위
    return (
        _visible(db, base)
        .order_by(Photo.average_rating.desc(), Photo.like_count.desc())
        .limit(limit)
        .all()
    )
