from datetime import datetime, timedelta, timezone

from app.db.base import SessionLocal
from app.models.common import as_aware
from app.models.notification import Notification
from app.models.photo import Photo
from app.models.profile import Profile
from app.models.report import Report

from conftest import auth_headers


def _seed_photo(owner_id: str) -> str:
    with SessionLocal() as s:
        photo = Photo(user_id=owner_id, title="night", image_url="https://x/y.jpg", category="camera")
        s.add(photo)
        s.commit()
        return photo.id


def _seed_report(reporter_id: str, owner_id: str, photo_id: str, status: str = "pending") -> str:
    with SessionLocal() as s:
        report = Report(
            content_type="photo", content_id=photo_id, reporter_id=reporter_id,
            reported_user_id=owner_id, reason="spam", status=status,
        )
        s.add(report)
        s.commit()
        return report.id


def test_create_report_resolves_reported_user_from_content(client, make_user):
    owner = make_user()
    reporter = make_user()
    photo_id = _seed_photo(owner)

    res = client.post(
        "/api/reports",
        json={"content_type": "photo", "content_id": photo_id, "reason": "spam"},
        headers=auth_headers(reporter),
    )

    assert res.status_code == 201
    body = res.json()
    assert body["reported_user_id"] == owner
    assert body["status"] == "pending"


def test_create_report_rejects_unknown_reason(client, make_user):
    owner = make_user()
    photo_id = _seed_photo(owner)

    res = client.post(
        "/api/reports",
        json={"content_type": "photo", "content_id": photo_id, "reason": "boring"},
        headers=auth_headers(make_user()),
    )

    assert res.status_code == 422


def test_third_warning_suspends_for_seven_days(client, make_user):
    moderator = make_user(role="moderator")
    owner = make_user(warning_count=2)
    photo_id = _seed_photo(owner)
    report_id = _seed_report(make_user(), owner, photo_id)

    before = datetime.now(timezone.utc)
    res = client.post(
        f"/api/admin/reports/{report_id}/actions",
        json={"action": "warn"},
        headers=auth_headers(moderator),
    )

    assert res.status_code == 200
    assert res.json()["status"] == "resolved"
    assert res.json()["resolution_note"] == "已對用戶發出警告"

    with SessionLocal() as s:
        prof = s.query(Profile).filter(Profile.user_id == owner).one()
        assert prof.warning_count == 3
        assert prof.is_suspended is True
        until = as_aware(prof.suspended_until)
        assert before + timedelta(days=7) - timedelta(minutes=1) <= until <= before + timedelta(days=7, minutes=1)
        assert prof.suspension_reason == "累計 3 次警告，自動停權 7 天"

        warning = s.query(Notification).filter(Notification.user_id == owner, Notification.type == "warning").one()
        assert warning.title == "您收到一則警告"
        assert warning.related_type == "photo"


def test_first_warning_does_not_suspend(client, make_user):
    moderator = make_user(role="admin")
    owner = make_user()
    report_id = _seed_report(make_user(), owner, _seed_photo(owner))

    res = client.post(
        f"/api/admin/reports/{report_id}/actions",
        json={"action": "warn", "note": "請勿洗版"},
        headers=auth_headers(moderator),
    )

    assert res.status_code == 200
    with SessionLocal() as s:
        prof = s.query(Profile).filter(Profile.user_id == owner).one()
        assert prof.warning_count == 1
        assert prof.is_suspended is False
        note = s.query(Notification).filter(Notification.user_id == owner).one()
        assert note.content == "請勿洗版"


def test_action_on_non_pending_report_is_rejected(client, make_user):
    moderator = make_user(role="moderator")
    owner = make_user()
    report_id = _seed_report(make_user(), owner, _seed_photo(owner))

    first = client.post(
        f"/api/admin/reports/{report_id}/actions",
        json={"action": "dismiss"},
        headers=auth_headers(moderator),
    )
    assert first.status_code == 200
    assert first.json()["status"] == "dismissed"
    assert first.json()["resolution_note"] == "檢舉不成立"

    second = client.post(
        f"/api/admin/reports/{report_id}/actions",
        json={"action": "warn", "note": "again"},
        headers=auth_headers(moderator),
    )
    assert second.status_code == 409
    assert second.json()["detail"] == "report_not_pending"

    with SessionLocal() as s:
        report = s.get(Report, report_id)
        assert report.status == "dismissed"
        assert report.resolution_note == "檢舉不成立"
        prof = s.query(Profile).filter(Profile.user_id == owner).one()
        assert prof.warning_count == 0


def test_hide_action_hides_reported_photo(client, make_user):
    moderator = make_user(role="moderator")
    owner = make_user()
    photo_id = _seed_photo(owner)
    report_id = _seed_report(make_user(), owner, photo_id)

    res = client.post(
        f"/api/admin/reports/{report_id}/actions",
        json={"action": "hide"},
        headers=auth_headers(moderator),
    )

    assert res.status_code == 200
    assert res.json()["resolution_note"] == "內容已隱藏"
    assert res.json()["resolved_by"] == moderator
    assert client.get(f"/api/photos/{photo_id}").status_code == 404


def test_regular_user_cannot_moderate(client, make_user):
    owner = make_user()
    report_id = _seed_report(make_user(), owner, _seed_photo(owner))

    res = client.post(
        f"/api/admin/reports/{report_id}/actions",
        json={"action": "resolve"},
        headers=auth_headers(make_user()),
    )

    assert res.status_code == 403


def test_suspended_user_cannot_comment_until_expiry(client, make_user):
    owner = make_user()
    photo_id = _seed_photo(owner)
    now = datetime.now(timezone.utc)
    active = make_user(is_suspended=True, suspended_until=now + timedelta(days=1))
    expired = make_user(is_suspended=True, suspended_until=now - timedelta(minutes=1))

    blocked = client.post(f"/api/photos/{photo_id}/comments", json={"content": "hi"}, headers=auth_headers(active))
    assert blocked.status_code == 403
    assert blocked.json()["detail"] == "account_suspended"

    allowed = client.post(f"/api/photos/{photo_id}/comments", json={"content": "hi"}, headers=auth_headers(expired))
    assert allowed.status_code == 201
    with SessionLocal() as s:
        assert s.query(Profile).filter(Profile.user_id == expired).one().is_suspended is False
