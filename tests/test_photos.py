from datetime import date

from app.db.base import SessionLocal
from app.models.photo import Comment, Photo, PhotoRating
from app.models.common import utcnow
from app.models.profile import Profile
from app.services.profile_service import record_upload

from conftest import auth_headers, jpeg_bytes


def _files(n: int):
    return [("files", (f"img{i}.jpg", jpeg_bytes(), "image/jpeg")) for i in range(n)]


def _seed_photo(owner_id: str, **fields) -> str:
    with SessionLocal() as s:
        photo = Photo(user_id=owner_id, image_url="https://x/y.jpg",
                      title=fields.pop("title", "photo"), category=fields.pop("category", "camera"), **fields)
        s.add(photo)
        s.commit()
        return photo.id


# ----------------------------
# 업로드
# ----------------------------
def test_upload_single_photo_with_tags(client, make_user, fake_supabase):
    user = make_user()

    res = client.post(
        "/api/photos",
        files=_files(1),
        data={"title": "Sunset", "category": "camera", "camera_body": "A7", "phone_model": "X", "tags": "夕陽, 風景"},
        headers=auth_headers(user),
    )

    assert res.status_code == 201
    body = res.json()
    item = body["items"][0]
    assert item["title"] == "Sunset"
    assert item["camera_body"] == "A7"
    assert item["phone_model"] is None
    assert item["image_url"].startswith("https://storage.test/photos/")
    assert item["thumbnail_url"].endswith("_thumb.jpg")
    assert body["quota"] == {"limit": 3, "used": 1, "remaining": 2}

    detail = client.get(f"/api/photos/{item['id']}").json()
    assert detail["tags"] == ["夕陽", "風景"]
    assert detail["view_count"] == 1


def test_upload_over_daily_quota_is_rejected(client, make_user, fake_supabase):
    user = make_user(daily_upload_count=2, last_upload_date=date.today())

    res = client.post(
        "/api/photos",
        files=_files(2),
        data={"title": "Too many", "category": "camera"},
        headers=auth_headers(user),
    )

    assert res.status_code == 429
    assert res.json()["detail"]["remaining"] == 1
    assert fake_supabase.storage.calls == []


def test_quota_resets_on_a_new_day(client, make_user):
    user = make_user(daily_upload_count=3, last_upload_date=date(2020, 1, 1))

    res = client.get("/api/me/upload-quota", headers=auth_headers(user))

    assert res.json() == {"limit": 3, "used": 0, "remaining": 3}


def test_quota_day_is_utc(client, make_user):
    user = make_user(daily_upload_count=2, last_upload_date=utcnow().date())

    res = client.get("/api/me/upload-quota", headers=auth_headers(user))

    assert res.json() == {"limit": 3, "used": 2, "remaining": 1}


def test_record_upload_stamps_utc_date():
    profile = Profile(user_id="u", username="u", daily_upload_count=0)

    record_upload(profile)

    assert profile.last_upload_date == utcnow().date()
    assert profile.daily_upload_count == 1


def test_failure_mid_batch_keeps_earlier_files(client, make_user, fake_supabase):
    user = make_user(is_vip=True)
    main_uploads = []

    def fail_on_third_image(bucket, path):
        if path.endswith("_thumb.jpg"):
            return False
        main_uploads.append(path)
        return len(main_uploads) == 3

    fake_supabase.storage.fail_when = fail_on_third_image

    res = client.post(
        "/api/photos",
        files=_files(6),
        data={"title": "Batch", "category": "phone"},
        headers=auth_headers(user),
    )

    assert res.status_code == 502
    detail = res.json()["detail"]
    assert detail["message"] == "upload_failed"
    assert detail["failed_index"] == 2
    assert len(detail["uploaded_ids"]) == 2

    with SessionLocal() as s:
        rows = s.query(Photo).filter(Photo.user_id == user).all()
        assert sorted(p.id for p in rows) == sorted(detail["uploaded_ids"])
        assert s.query(Profile).filter(Profile.user_id == user).one().daily_upload_count == 2


def test_undecodable_image_is_a_client_error(client, make_user, fake_supabase):
    user = make_user()
    files = _files(1) + [("files", ("broken.jpg", b"not-an-image", "image/jpeg"))]

    res = client.post("/api/photos", files=files, data={"title": "Pair", "category": "camera"},
                      headers=auth_headers(user))

    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["message"] == "invalid_image"
    assert detail["failed_index"] == 1
    assert len(detail["uploaded_ids"]) == 1
    # 첫 파일 본문 + 썸네일만 올라감
    assert len(fake_supabase.storage.calls) == 2
    with SessionLocal() as s:
        assert s.query(Photo).filter(Photo.user_id == user).count() == 1


def test_thumbnail_failure_is_tolerated(client, make_user, fake_supabase):
    user = make_user()
    fake_supabase.storage.fail_when = lambda bucket, path: path.endswith("_thumb.jpg")

    res = client.post("/api/photos", files=_files(1), data={"title": "t", "category": "camera"},
                      headers=auth_headers(user))

    assert res.status_code == 201
    assert res.json()["items"][0]["thumbnail_url"] is None


def test_non_image_upload_is_rejected(client, make_user):
    res = client.post(
        "/api/photos",
        files=[("files", ("notes.txt", b"hello", "text/plain"))],
        data={"title": "t", "category": "camera"},
        headers=auth_headers(make_user()),
    )

    assert res.status_code == 400
    assert res.json()["detail"] == "invalid_file_type"


# ----------------------------
# 평점
# ----------------------------
def test_rating_twice_keeps_one_row_with_latest_value(client, make_user):
    owner = make_user()
    rater = make_user()
    photo_id = _seed_photo(owner)

    client.put(f"/api/photos/{photo_id}/rating", json={"rating": 2}, headers=auth_headers(rater))
    res = client.put(f"/api/photos/{photo_id}/rating", json={"rating": 5}, headers=auth_headers(rater))

    assert res.status_code == 200
    assert res.json() == {"rating": 5, "average_rating": 5.0, "rating_count": 1}
    with SessionLocal() as s:
        rows = s.query(PhotoRating).filter(PhotoRating.photo_id == photo_id).all()
        assert [r.rating for r in rows] == [5]
    assert client.get(f"/api/photos/{photo_id}/rating", headers=auth_headers(rater)).json() == {"rating": 5}


def test_rating_out_of_range_is_rejected(client, make_user):
    photo_id = _seed_photo(make_user())

    res = client.put(f"/api/photos/{photo_id}/rating", json={"rating": 6}, headers=auth_headers(make_user()))

    assert res.status_code == 422


# ----------------------------
# 댓글
# ----------------------------
def test_comments_are_two_levels(client, make_user):
    owner = make_user()
    commenter = make_user()
    photo_id = _seed_photo(owner)
    h = auth_headers(commenter)

    top = client.post(f"/api/photos/{photo_id}/comments", json={"content": "nice"}, headers=h).json()
    reply = client.post(f"/api/photos/{photo_id}/comments",
                        json={"content": "thanks", "parent_id": top["id"]}, headers=auth_headers(owner))
    assert reply.status_code == 201

    nested = client.post(f"/api/photos/{photo_id}/comments",
                         json={"content": "deeper", "parent_id": reply.json()["id"]}, headers=h)
    assert nested.status_code == 400
    assert nested.json()["detail"] == "reply_depth_exceeded"

    thread = client.get(f"/api/photos/{photo_id}/comments").json()
    assert len(thread) == 1
    assert [r["content"] for r in thread[0]["replies"]] == ["thanks"]

    with SessionLocal() as s:
        assert s.get(Photo, photo_id).comment_count == 2
        assert s.query(Comment).count() == 2


def test_comment_notifies_owner_but_not_self(client, make_user):
    owner = make_user()
    photo_id = _seed_photo(owner)

    client.post(f"/api/photos/{photo_id}/comments", json={"content": "mine"}, headers=auth_headers(owner))
    client.post(f"/api/photos/{photo_id}/comments", json={"content": "yours"}, headers=auth_headers(make_user()))

    res = client.get("/api/notifications", headers=auth_headers(owner)).json()
    assert len(res) == 1
    assert res[0]["type"] == "comment"
    assert res[0]["link"] == f"/gallery/{photo_id}"


# ----------------------------
# 삭제
# ----------------------------
def test_owner_deletes_photo_with_dependents(client, make_user):
    owner = make_user()
    photo_id = _seed_photo(owner)
    other = make_user()
    client.put(f"/api/photos/{photo_id}/rating", json={"rating": 4}, headers=auth_headers(other))
    client.post(f"/api/photos/{photo_id}/comments", json={"content": "x"}, headers=auth_headers(other))

    assert client.delete(f"/api/photos/{photo_id}", headers=auth_headers(other)).status_code == 403
    assert client.delete(f"/api/photos/{photo_id}", headers=auth_headers(owner)).status_code == 204

    with SessionLocal() as s:
        assert s.get(Photo, photo_id) is None
        assert s.query(PhotoRating).count() == 0
        assert s.query(Comment).count() == 0


def test_list_hides_hidden_photos_and_pages(client, make_user):
    owner = make_user()
    for i in range(3):
        _seed_photo(owner, title=f"p{i}")
    _seed_photo(owner, title="secret", is_hidden=True)

    first = client.get("/api/photos", params={"page": 0, "page_size": 2}).json()
    second = client.get("/api/photos", params={"page": 1, "page_size": 2}).json()

    assert len(first["items"]) == 2 and first["has_more"] is True
    assert len(second["items"]) == 1 and second["has_more"] is False
    titles = {p["title"] for p in first["items"] + second["items"]}
    assert "secret" not in titles


def test_unauthenticated_upload_is_401(client):
    res = client.post("/api/photos", files=_files(1), data={"title": "t", "category": "camera"})
    assert res.status_code == 401
