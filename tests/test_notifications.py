import uuid

from app.db.base import SessionLocal
from app.models.forum import ForumReply, ForumTopic
from app.models.notification import Notification
from app.services import content_ref
from app.services.notification_service import serialize

from conftest import auth_headers


def test_parse_ref_unknown_kind_is_none():
    assert content_ref.parse_ref("video", str(uuid.uuid4())) is None
    assert content_ref.parse_ref("photo", None) is None
    assert isinstance(content_ref.parse_ref("forum_topic", "x"), content_ref.TopicRef)


def test_reply_link_resolves_to_topic(make_user):
    user = make_user()
    with SessionLocal() as s:
        topic = ForumTopic(user_id=user, title="t", content="c", category="g")
        s.add(topic)
        s.flush()
        reply = ForumReply(topic_id=topic.id, user_id=user, content="r")
        s.add(reply)
        s.flush()
        n = Notification(user_id=user, type="reply", title="t", related_type="forum_reply", related_id=reply.id)
        s.add(n)
        s.commit()

        assert serialize(s, n)["link"] == f"/forums/topic/{topic.id}"


def test_mark_read_and_delete(client, make_user):
    user = make_user()
    with SessionLocal() as s:
        rows = [Notification(user_id=user, type="comment", title=f"n{i}") for i in range(3)]
        s.add_all(rows)
        s.commit()
        ids = [r.id for r in rows]
    h = auth_headers(user)

    assert client.post(f"/api/notifications/{ids[0]}/read", headers=h).json()["is_read"] is True
    assert client.get("/api/notifications/unread-count", headers=h).json() == {"count": 2}

    assert client.post("/api/notifications/read-all", headers=h).status_code == 204
    assert client.get("/api/notifications/unread-count", headers=h).json() == {"count": 0}

    assert client.delete(f"/api/notifications/{ids[1]}", headers=h).status_code == 204
    assert len(client.get("/api/notifications", headers=h).json()) == 2


def test_cannot_touch_someone_elses_notification(client, make_user):
    owner = make_user()
    with SessionLocal() as s:
        n = Notification(user_id=owner, type="comment", title="n")
        s.add(n)
        s.commit()
        nid = n.id

    res = client.post(f"/api/notifications/{nid}/read", headers=auth_headers(make_user()))

    assert res.status_code == 404
