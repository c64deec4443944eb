"""Notification inbox tests."""

import pytest
from sqlalchemy import event

from warden.core.moderation_policy import ModerationPolicy
from warden.core.ws_manager import ws_manager
from warden.db.session import atomic, engine
from warden.models.enums import ModerationAction, PostStatus
from warden.models.post import Post
from warden.services.moderation_service import get_moderation_log, set_post_status, transition
from warden.services.notification_service import list_notifications
from warden.services.post_service import get_post_for_update


def _approve(client, admin, post_id):
    r = client.patch(f"/admin/posts/{post_id}/status", headers=admin.headers, json={"status": "APPROVED"})
    assert r.status_code == 200, r.json()


def test_admin_decision_lands_in_author_inbox(client, admin, make_user, make_post):
    author = make_user()
    post = make_post(author, title="Wallet stolen on bus 12")
    _approve(client, admin, post["id"])

    inbox = client.get("/notifications", headers=author.headers).json()
    assert inbox["unread"] == 1
    note = inbox["data"][0]
    assert note["type"] == "POST_APPROVED"
    assert note["is_read"] is False
    assert "Wallet stolen on bus 12" in note["message"]
    assert note["data"]["post_id"] == post["id"]
    assert note["data"]["previous_status"] == "PENDING"
    assert note["data"]["status"] == "APPROVED"


def test_auto_rejection_notifies_author_only(client, use_policy, make_user, make_post):
    use_policy(auto_reject_report_threshold=1)
    author, reporter = make_user(), make_user()
    post = make_post(author)
    client.post(f"/posts/{post['id']}/report", headers=reporter.headers, json={"reason": "spam"})

    unread = client.get("/notifications/unread", headers=author.headers).json()
    assert [n["type"] for n in unread] == ["POST_REJECTED"]
    assert "report count 1 >= 1" in unread[0]["data"]["reason"]
    assert client.get("/notifications", headers=reporter.headers).json() == {"unread": 0, "data": []}


def test_mark_read_and_mark_all_read(client, admin, make_user, make_post):
    author = make_user()
    first, second, third = (make_post(author) for _ in range(3))
    for post in (first, second, third):
        _approve(client, admin, post["id"])

    note_id = client.get("/notifications/unread", headers=author.headers).json()[0]["id"]
    r = client.patch(f"/notifications/{note_id}/read", headers=author.headers)
    assert r.status_code == 200
    assert r.json()["is_read"] is True
    assert len(client.get("/notifications/unread", headers=author.headers).json()) == 2

    r = client.patch("/notifications/mark-all-read", headers=author.headers)
    assert r.json() == {"updated": 2}
    assert client.get("/notifications/unread", headers=author.headers).json() == []
    assert client.get("/notifications", headers=author.headers).json()["unread"] == 0


def test_notifications_are_private(client, admin, make_user, make_post):
    author, stranger = make_user(), make_user()
    post = make_post(author)
    _approve(client, admin, post["id"])
    note_id = client.get("/notifications", headers=author.headers).json()["data"][0]["id"]

    assert client.patch(f"/notifications/{note_id}/read", headers=stranger.headers).status_code == 404
    assert client.delete(f"/notifications/{note_id}", headers=stranger.headers).status_code == 404
    assert client.get("/notifications/unread", headers=author.headers).json()[0]["id"] == note_id


def test_delete_notification(client, admin, make_user, make_post):
    author = make_user()
    post = make_post(author)
    _approve(client, admin, post["id"])
    note_id = client.get("/notifications", headers=author.headers).json()["data"][0]["id"]

    r = client.delete(f"/notifications/{note_id}", headers=author.headers)
    assert r.status_code == 200
    assert client.get("/notifications", headers=author.headers).json()["data"] == []
    assert client.delete(f"/notifications/{note_id}", headers=author.headers).status_code == 404


def test_inbox_requires_auth(client):
    assert client.get("/notifications").status_code == 401


def test_rolled_back_transition_leaves_no_trace(db, monkeypatch, make_user, make_post):
    pushed = []
    monkeypatch.setattr(ws_manager, "notify", lambda *args: pushed.append(args))
    author = make_user()
    post = make_post(author)

    with pytest.raises(RuntimeError):
        with atomic(db):
            row = get_post_for_update(db, post["id"])
            transition(db, row, PostStatus.APPROVED, ModerationAction.ADMIN_REVIEW, actor_id=author.id)
            raise RuntimeError("abort after transition")

    assert pushed == []
    assert db.get(Post, post["id"]).status == "PENDING"
    assert list_notifications(db, author.id) == []
    assert get_moderation_log(db, post["id"]) == []

    # Callbacks from the aborted block must not leak into the next commit
    with atomic(db):
        pass
    assert pushed == []


def test_push_payload_needs_no_reload_after_commit(db, monkeypatch, admin, make_user, make_post):
    post = make_post(make_user(), title="Bike chain cut outside library")
    statements = []
    commits = []
    pushed = []

    def _count(*args):
        statements.append(args[2])

    monkeypatch.setattr(ws_manager, "notify", lambda user_id, name, data: pushed.append((len(statements), data)))
    event.listen(db, "after_commit", lambda session: commits.append(len(statements)))
    event.listen(engine, "before_cursor_execute", _count)
    try:
        set_post_status(db, post["id"], PostStatus.APPROVED, admin.id, ModerationPolicy())
    finally:
        event.remove(engine, "before_cursor_execute", _count)

    assert len(pushed) == 1
    issued_at_push, data = pushed[0]
    assert issued_at_push == commits[-1]
    assert data["title"] == "Bike chain cut outside library"
    assert data["status"] == "APPROVED"
    assert isinstance(data["notification_id"], int)
