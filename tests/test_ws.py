"""WebSocket endpoint tests."""

import pytest
from starlette.websockets import WebSocketDisconnect

from warden.core.ws_manager import ConnectionManager


def test_ws_rejects_missing_token(client):
    with pytest.raises(WebSocketDisconnect) as info:
        with client.websocket_connect("/ws") as ws:
            ws.receive_text()
    assert info.value.code == 4001


def test_ws_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect) as info:
        with client.websocket_connect("/ws?token=nope") as ws:
            ws.receive_text()
    assert info.value.code == 4003


def test_ws_ready_then_ping_pong(client, make_user, make_post):
    user = make_user()
    post = make_post(user)
    with client.websocket_connect(f"/ws?token={user.token}") as ws:
        ready = ws.receive_json()
        assert ready["event"] == "session.ready"
        assert ready["data"] == {"user_id": user.id, "pending_posts": [post["id"]]}
        ws.send_text("ping")
        assert ws.receive_json() == {"event": "pong"}


def test_notify_without_connection_is_noop():
    manager = ConnectionManager()
    manager.notify(42, "post.status_changed", {"post_id": 1})
    assert manager.total_connections == 0


def _connect_ready(ws):
    assert ws.receive_json()["event"] == "session.ready"


def test_admin_decision_is_pushed_to_author(client, admin, make_user, make_post):
    author = make_user()
    post = make_post(author)
    with client.websocket_connect(f"/ws?token={author.token}") as ws:
        _connect_ready(ws)
        r = client.patch(f"/admin/posts/{post['id']}/status", headers=admin.headers, json={"status": "APPROVED"})
        assert r.status_code == 200
        pushed = ws.receive_json()

    assert pushed["event"] == "post.status_changed"
    assert pushed["data"]["post_id"] == post["id"]
    assert pushed["data"]["previous_status"] == "PENDING"
    assert pushed["data"]["status"] == "APPROVED"
    assert pushed["data"]["title"] == post["title"]
    inbox = client.get("/notifications", headers=author.headers).json()
    assert pushed["data"]["notification_id"] == inbox["data"][0]["id"]


def test_report_auto_rejection_is_pushed_to_author(client, use_policy, make_user, make_post):
    use_policy(auto_reject_report_threshold=1)
    author = make_user()
    post = make_post(author)
    with client.websocket_connect(f"/ws?token={author.token}") as ws:
        _connect_ready(ws)
        r = client.post(f"/posts/{post['id']}/report", headers=make_user().headers, json={"reason": "spam"})
        assert r.status_code == 201
        pushed = ws.receive_json()

    assert pushed["event"] == "post.status_changed"
    assert pushed["data"]["post_id"] == post["id"]
    assert pushed["data"]["status"] == "REJECTED"


def test_rolled_back_decision_is_not_pushed(db, monkeypatch, admin, make_user, make_post):
    from warden.core.ws_manager import ws_manager
    from warden.db.session import atomic
    from warden.models.enums import ModerationAction, PostStatus
    from warden.services.moderation_service import transition
    from warden.services.post_service import get_post_for_update

    pushed = []
    monkeypatch.setattr(ws_manager, "notify", lambda *args: pushed.append(args))
    post = make_post(make_user())

    with pytest.raises(RuntimeError):
        with atomic(db):
            transition(
                db, get_post_for_update(db, post["id"]), PostStatus.REJECTED,
                ModerationAction.ADMIN_REVIEW, actor_id=admin.id,
            )
            raise RuntimeError("write failed")
    with atomic(db):
        pass

    assert pushed == []
