from app.db.base import SessionLocal
from app.models.photo import Photo
from app.services.recommendation import rank_similar, similarity_score


def _photo(pid, brand, category):
    return Photo(id=pid, brand=brand, category=category, title=pid, image_url="u", user_id="x")


def test_rank_orders_both_then_brand_then_category_then_neither():
    base = _photo("base", "Sony", "camera")
    candidates = [
        _photo("neither", "Canon", "phone"),
        _photo("category", "Canon", "camera"),
        _photo("both", "Sony", "camera"),
        _photo("brand", "Sony", "phone"),
    ]

    ranked = [p.id for p in rank_similar(base, candidates)]

    assert ranked == ["both", "brand", "category", "neither"]


def test_ties_keep_query_order():
    base = _photo("base", "Sony", "camera")
    candidates = [_photo("a", "Sony", "phone"), _photo("b", "Sony", "phone")]

    assert [p.id for p in rank_similar(base, candidates)] == ["a", "b"]


def test_missing_brand_on_base_scores_category_only():
    base = _photo("base", None, "camera")

    assert similarity_score(base, _photo("c", None, "camera")) == 1
    assert similarity_score(base, _photo("d", None, "phone")) == 0


def test_similar_endpoint_excludes_self_and_hidden(client, make_user):
    owner = make_user()
    with SessionLocal() as s:
        base = Photo(user_id=owner, title="base", image_url="u", category="camera", brand="Sony")
        s.add_all([
            base,
            Photo(user_id=owner, title="brand", image_url="u", category="phone", brand="Sony"),
            Photo(user_id=owner, title="both", image_url="u", category="camera", brand="Sony"),
            Photo(user_id=owner, title="hidden", image_url="u", category="camera", brand="Sony", is_hidden=True),
            Photo(user_id=owner, title="other", image_url="u", category="phone", brand="Apple"),
        ])
        s.commit()
        base_id = base.id

    titles = [p["title"] for p in client.get(f"/api/photos/{base_id}/similar").json()]

    assert titles == ["both", "brand"]


def test_similar_falls_back_to_top_rated(client, make_user):
    owner = make_user()
    with SessionLocal() as s:
        base = Photo(user_id=owner, title="base", image_url="u", category="camera", brand="Leica")
        s.add_all([
            base,
            Photo(user_id=owner, title="low", image_url="u", category="phone", brand="Apple", average_rating=2),
            Photo(user_id=owner, title="high", image_url="u", category="phone", brand="Google", average_rating=4.5),
        ])
        s.commit()
        base_id = base.id

    titles = [p["title"] for p in client.get(f"/api/photos/{base_id}/similar").json()]

    assert titles == ["high", "low"]
