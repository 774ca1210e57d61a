from app.db.base import SessionLocal
from app.models.message import Message

from conftest import auth_headers


def _open(client, me, other, listing_id=None):
    return client.post("/api/conversations", json={"other_user_id": other, "listing_id": listing_id},
                       headers=auth_headers(me))


def test_get_or_create_returns_same_conversation_for_both_sides(client, make_user):
    a = make_user()
    b = make_user()

    first = _open(client, a, b).json()
    second = _open(client, b, a).json()

    assert first["id"] == second["id"]


def test_cannot_message_yourself(client, make_user):
    a = make_user()

    res = _open(client, a, a)

    assert res.status_code == 400
    assert res.json()["detail"] == "cannot_message_self"


def test_send_and_read_marks_other_side_read(client, make_user):
    a = make_user()
    b = make_user()
    conv = _open(client, a, b).json()

    sent = client.post(f"/api/conversations/{conv['id']}/messages", json={"content": "還在嗎？"},
                       headers=auth_headers(a))
    assert sent.status_code == 201

    inbox = client.get("/api/conversations", headers=auth_headers(b)).json()
    assert inbox[0]["unread_count"] == 1
    assert inbox[0]["last_message"]["content"] == "還在嗎？"
    assert inbox[0]["other_user"]["user_id"] == a

    messages = client.get(f"/api/conversations/{conv['id']}/messages", headers=auth_headers(b)).json()
    assert [m["content"] for m in messages] == ["還在嗎？"]

    with SessionLocal() as s:
        assert s.query(Message).one().is_read is True
    assert client.get("/api/conversations", headers=auth_headers(b)).json()[0]["unread_count"] == 0


def test_sender_reading_does_not_mark_own_message(client, make_user):
    a = make_user()
    b = make_user()
    conv = _open(client, a, b).json()
    client.post(f"/api/conversations/{conv['id']}/messages", json={"content": "hi"}, headers=auth_headers(a))

    client.get(f"/api/conversations/{conv['id']}/messages", headers=auth_headers(a))

    with SessionLocal() as s:
        assert s.query(Message).one().is_read is False


def test_message_notifies_recipient_with_conversation_link(client, make_user):
    a = make_user()
    b = make_user()
    conv = _open(client, a, b).json()
    client.post(f"/api/conversations/{conv['id']}/messages", json={"content": "hi"}, headers=auth_headers(a))

    notes = client.get("/api/notifications", headers=auth_headers(b)).json()

    assert notes[0]["type"] == "message"
    assert notes[0]["related_type"] == "message"
    assert notes[0]["link"] == f"/messages/{conv['id']}"
    assert client.get("/api/notifications/unread-count", headers=auth_headers(b)).json() == {"count": 1}


def test_outsider_cannot_read_conversation(client, make_user):
    a = make_user()
    b = make_user()
    conv = _open(client, a, b).json()

    res = client.get(f"/api/conversations/{conv['id']}/messages", headers=auth_headers(make_user()))

    assert res.status_code == 403
