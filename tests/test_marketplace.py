from app.db.base import SessionLocal
from app.models.marketplace import MarketplaceListing

from conftest import auth_headers, jpeg_bytes

FORM = {
    "title": "Sony A7 III",
    "description": "快門數 5000",
    "category": "camera",
    "condition": "like_new",
    "price": "32000",
    "brand": "Sony",
}


def _create(client, user, **extra):
    files = [("verification_image", ("verify.jpg", jpeg_bytes(), "image/jpeg"))]
    files += [("images", (f"extra{i}.jpg", jpeg_bytes(), "image/jpeg")) for i in range(extra.pop("extra", 0))]
    return client.post("/api/marketplace/listings", data={**FORM, **extra}, files=files, headers=auth_headers(user))


def test_create_listing_uploads_verification_and_extra_images(client, make_user, fake_supabase):
    user = make_user()

    res = _create(client, user, extra=2)

    assert res.status_code == 201
    body = res.json()
    assert body["currency"] == "TWD"
    assert body["verification_image_url"].startswith("https://storage.test/verification/")
    assert len(body["additional_images"]) == 2
    assert all(u.startswith("https://storage.test/photos/") for u in body["additional_images"])


def test_verification_image_is_required(client, make_user):
    res = client.post("/api/marketplace/listings", data=FORM, headers=auth_headers(make_user()))

    assert res.status_code == 422


def test_sold_listings_drop_out_of_search(client, make_user):
    seller = make_user()
    listing = _create(client, seller).json()
    assert len(client.get("/api/marketplace/listings", params={"brand": "Sony"}).json()) == 1

    client.post(f"/api/marketplace/listings/{listing['id']}/sold", json={"is_sold": True}, headers=auth_headers(seller))

    assert client.get("/api/marketplace/listings").json() == []


def test_price_filter(client, make_user):
    seller = make_user()
    _create(client, seller)

    assert client.get("/api/marketplace/listings", params={"max_price": 1000}).json() == []
    assert len(client.get("/api/marketplace/listings", params={"min_price": 1000}).json()) == 1


def test_non_finite_price_is_rejected(client, make_user, fake_supabase):
    seller = make_user()

    for bad in ("nan", "inf"):
        res = _create(client, seller, price=bad)
        assert res.status_code == 400
        assert res.json()["detail"] == "invalid_price"

    assert fake_supabase.storage.calls == []
    with SessionLocal() as s:
        assert s.query(MarketplaceListing).count() == 0


def test_only_owner_can_update_or_delete(client, make_user):
    seller = make_user()
    listing = _create(client, seller).json()
    stranger = auth_headers(make_user())

    assert client.patch(f"/api/marketplace/listings/{listing['id']}", json={"price": 1}, headers=stranger).status_code == 403
    assert client.delete(f"/api/marketplace/listings/{listing['id']}", headers=stranger).status_code == 403

    updated = client.patch(f"/api/marketplace/listings/{listing['id']}", json={"price": 30000},
                           headers=auth_headers(seller))
    assert updated.json()["price"] == 30000.0

    assert client.delete(f"/api/marketplace/listings/{listing['id']}", headers=auth_headers(seller)).status_code == 204
    with SessionLocal() as s:
        assert s.query(MarketplaceListing).count() == 0


def test_detail_increments_views(client, make_user):
    listing = _create(client, make_user()).json()

    client.get(f"/api/marketplace/listings/{listing['id']}")
    body = client.get(f"/api/marketplace/listings/{listing['id']}").json()

    assert body["view_count"] == 2
    assert body["seller"]["user_id"] == listing["user_id"]
