from app.db.base import SessionLocal
from app.models.photo import Photo

from conftest import auth_headers


def _photo(owner):
    with SessionLocal() as s:
        p = Photo(user_id=owner, title="p", image_url="u", category="camera")
        s.add(p)
        s.commit()
        return p.id


def test_toggle_adds_then_removes(client, make_user):
    user = make_user()
    photo_id = _photo(make_user())
    h = auth_headers(user)
    body = {"content_type": "photo", "content_id": photo_id}

    assert client.post("/api/favorites/toggle", json=body, headers=h).json() == {"is_favorited": True}
    assert client.get("/api/favorites/check", params=body, headers=h).json() == {"is_favorited": True}
    assert [f["content_id"] for f in client.get("/api/favorites", headers=h).json()] == [photo_id]

    assert client.post("/api/favorites/toggle", json=body, headers=h).json() == {"is_favorited": False}
    assert client.get("/api/favorites", headers=h).json() == []


def test_add_is_idempotent(client, make_user):
    user = make_user()
    photo_id = _photo(make_user())
    h = auth_headers(user)
    body = {"content_type": "photo", "content_id": photo_id}

    first = client.post("/api/favorites", json=body, headers=h).json()
    second = client.post("/api/favorites", json=body, headers=h).json()

    assert first["id"] == second["id"]


def test_only_photos_and_listings_can_be_favorited(client, make_user):
    res = client.post("/api/favorites", json={"content_type": "forum_topic", "content_id": _photo(make_user())},
                      headers=auth_headers(make_user()))

    assert res.status_code == 400
    assert res.json()["detail"] == "invalid_content_type"
