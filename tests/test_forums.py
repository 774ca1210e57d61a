import uuid

from app.db.base import SessionLocal
from app.models.forum import ForumCategory, ForumTopic
from app.models.notification import Notification
from app.services.forum_service import build_category_tree

from conftest import auth_headers


def _cat(name, parent_id=None, sort_order=0, **fields):
    return ForumCategory(id=str(uuid.uuid4()), name=name, slug=name.lower(), parent_id=parent_id,
                         sort_order=sort_order, **fields)


def test_tree_never_exposes_third_level():
    root = _cat("Cameras")
    child = _cat("Sony", parent_id=root.id)
    grandchild = _cat("A7", parent_id=child.id)
    orphan = _cat("Lost", parent_id=str(uuid.uuid4()))

    tree = build_category_tree([grandchild, orphan, child, root])

    assert [r.row.name for r in tree] == ["Cameras"]
    assert [c.row.name for c in tree[0].children] == ["Sony"]
    assert not hasattr(tree[0].children[0], "children")


def test_children_sorted_by_sort_order():
    root = _cat("Phones")
    tree = build_category_tree([
        root,
        _cat("Pixel", parent_id=root.id, sort_order=2),
        _cat("iPhone", parent_id=root.id, sort_order=1),
    ])

    assert [c.row.name for c in tree[0].children] == ["iPhone", "Pixel"]


def test_categories_endpoint_returns_active_two_level_tree(client):
    with SessionLocal() as s:
        root = _cat("Cameras")
        child = _cat("Sony", parent_id=root.id)
        s.add_all([root, child])
        s.flush()
        s.add_all([_cat("A7", parent_id=child.id), _cat("Off", is_active=False)])
        s.commit()

    tree = client.get("/api/forums/categories").json()

    assert [r["name"] for r in tree] == ["Cameras"]
    assert [c["name"] for c in tree[0]["children"]] == ["Sony"]
    assert "children" not in tree[0]["children"][0]


def test_admin_cannot_create_third_level(client, make_user):
    admin = make_user(role="admin")
    h = auth_headers(admin)
    root = client.post("/api/admin/categories", json={"name": "Gear", "slug": "gear"}, headers=h).json()
    child = client.post("/api/admin/categories",
                        json={"name": "Lens", "slug": "lens", "parent_id": root["id"]}, headers=h).json()

    res = client.post("/api/admin/categories",
                      json={"name": "Prime", "slug": "prime", "parent_id": child["id"]}, headers=h)

    assert res.status_code == 400
    assert res.json()["detail"] == "category_depth_exceeded"


def test_topic_category_text_follows_category_id(client, make_user):
    with SessionLocal() as s:
        cat = _cat("Street")
        s.add(cat)
        s.commit()
        cat_id = cat.id

    res = client.post(
        "/api/forums/topics",
        json={"title": "Hello", "content": "first post", "category_id": cat_id, "category": "ignored"},
        headers=auth_headers(make_user()),
    )

    assert res.status_code == 201
    assert res.json()["category"] == "Street"
    assert res.json()["category_id"] == cat_id


def test_reply_updates_counters_and_notifies_author(client, make_user):
    author = make_user()
    replier = make_user()
    topic = client.post("/api/forums/topics", json={"title": "T", "content": "C", "category": "general"},
                        headers=auth_headers(author)).json()

    res = client.post(f"/api/forums/topics/{topic['id']}/replies", json={"content": "reply"},
                      headers=auth_headers(replier))

    assert res.status_code == 201
    with SessionLocal() as s:
        row = s.get(ForumTopic, topic["id"])
        assert row.reply_count == 1
        assert row.last_reply_at is not None
        n = s.query(Notification).filter(Notification.user_id == author).one()
        assert n.related_type == "forum_topic"


def test_locked_topic_rejects_replies(client, make_user):
    moderator = make_user(role="moderator")
    author = make_user()
    topic = client.post("/api/forums/topics", json={"title": "T", "content": "C", "category": "general"},
                        headers=auth_headers(author)).json()

    locked = client.post(f"/api/admin/topics/{topic['id']}/toggle-lock", headers=auth_headers(moderator))
    assert locked.json()["is_locked"] is True

    res = client.post(f"/api/forums/topics/{topic['id']}/replies", json={"content": "late"},
                      headers=auth_headers(author))
    assert res.status_code == 409
    assert res.json()["detail"] == "topic_locked"


def test_pinned_topics_listed_first(client, make_user):
    moderator = make_user(role="moderator")
    h = auth_headers(make_user())
    old = client.post("/api/forums/topics", json={"title": "old", "content": "c", "category": "g"}, headers=h).json()
    client.post("/api/forums/topics", json={"title": "new", "content": "c", "category": "g"}, headers=h)
    client.post(f"/api/admin/topics/{old['id']}/toggle-pin", headers=auth_headers(moderator))

    titles = [t["title"] for t in client.get("/api/forums/topics").json()]

    assert titles == ["old", "new"]
