"""Post status transitions, overrides and the moderation log."""


def _set_status(client, admin, post_id, status, reason=None):
    return client.patch(
        f"/admin/posts/{post_id}/status",
        headers=admin.headers,
        json={"status": status, "reason": reason},
    )


def _log(client, admin, post_id):
    r = client.get(f"/admin/posts/{post_id}/moderation-log", headers=admin.headers)
    assert r.status_code == 200
    return r.json()


def test_admin_review_then_override_is_audited(client, admin, make_user, make_post):
    post = make_post(make_user())

    r = _set_status(client, admin, post["id"], "APPROVED", reason="Matches police bulletin")
    assert r.status_code == 200
    assert r.json()["status"] == "APPROVED"

    r = _set_status(client, admin, post["id"], "REJECTED", reason="Duplicate of an earlier report")
    assert r.status_code == 200
    assert r.json()["status"] == "REJECTED"

    log = _log(client, admin, post["id"])
    assert [(e["action"], e["previous_status"], e["new_status"]) for e in log] == [
        ("ADMIN_REVIEW", "PENDING", "APPROVED"),
        ("OVERRIDE", "APPROVED", "REJECTED"),
    ]
    assert {e["actor_id"] for e in log} == {admin.id}
    assert log[1]["reason"] == "Duplicate of an earlier report"


def test_same_status_is_rejected(client, admin, make_user, make_post):
    post = make_post(make_user())
    r = _set_status(client, admin, post["id"], "PENDING")
    assert r.status_code == 400
    assert _log(client, admin, post["id"]) == []


def test_status_change_requires_admin(client, make_user, make_post):
    author = make_user()
    post = make_post(author)
    r = client.patch(f"/admin/posts/{post['id']}/status", headers=author.headers, json={"status": "APPROVED"})
    assert r.status_code == 403


def test_override_of_auto_rejection_allowed_by_default(client, use_policy, admin, make_user, make_post):
    use_policy(auto_reject_report_threshold=1)
    post = make_post(make_user())
    client.post(f"/posts/{post['id']}/report", headers=make_user().headers, json={"reason": "spam"})
    assert client.get(f"/posts/{post['id']}").json()["status"] == "REJECTED"

    r = _set_status(client, admin, post["id"], "APPROVED", reason="Report was malicious")
    assert r.status_code == 200
    assert r.json()["status"] == "APPROVED"
    assert [e["action"] for e in _log(client, admin, post["id"])] == ["AUTO_REJECT", "OVERRIDE"]


def test_override_of_auto_rejection_can_be_disabled(client, use_policy, admin, make_user, make_post):
    use_policy(auto_reject_report_threshold=1, allow_override_of_auto_rejection=False)
    post = make_post(make_user())
    client.post(f"/posts/{post['id']}/report", headers=make_user().headers, json={"reason": "spam"})

    r = _set_status(client, admin, post["id"], "APPROVED")
    assert r.status_code == 409
    assert client.get(f"/posts/{post['id']}").json()["status"] == "REJECTED"


def test_approved_post_not_auto_rejected_by_default(client, use_policy, admin, make_user, make_post):
    use_policy(auto_reject_report_threshold=1)
    post = make_post(make_user())
    _set_status(client, admin, post["id"], "APPROVED")

    client.post(f"/posts/{post['id']}/report", headers=make_user().headers, json={"reason": "spam"})
    data = client.get(f"/posts/{post['id']}").json()
    assert data["report_count"] == 1
    assert data["status"] == "APPROVED"


def test_approved_post_auto_rejected_when_enabled(client, use_policy, admin, make_user, make_post):
    use_policy(auto_reject_report_threshold=1, auto_reject_approved_posts=True)
    post = make_post(make_user())
    _set_status(client, admin, post["id"], "APPROVED")

    client.post(f"/posts/{post['id']}/report", headers=make_user().headers, json={"reason": "spam"})
    assert client.get(f"/posts/{post['id']}").json()["status"] == "REJECTED"


def test_low_score_auto_rejects(client, use_policy, admin, make_user, make_post):
    use_policy(baseline=1)
    post = make_post(make_user())
    r = client.post(f"/posts/{post['id']}/downvote", headers=make_user().headers)
    assert r.json()["verification_score"] == 0
    assert r.json()["status"] == "REJECTED"

    log = _log(client, admin, post["id"])
    assert log[0]["action"] == "AUTO_REJECT"
    assert "verification score 0 <= 0" in log[0]["reason"]


def test_auto_approve_threshold(client, use_policy, admin, make_user, make_post):
    use_policy(auto_approve_score_threshold=54)
    post = make_post(make_user())

    r = client.post(f"/posts/{post['id']}/upvote", headers=make_user().headers)
    assert r.json()["status"] == "PENDING"
    r = client.post(f"/posts/{post['id']}/upvote", headers=make_user().headers)
    assert r.json()["verification_score"] == 54
    assert r.json()["status"] == "APPROVED"
    assert [e["action"] for e in _log(client, admin, post["id"])] == ["AUTO_APPROVE"]


def test_admin_stats(client, admin, make_user, make_post):
    make_post(make_user())
    r = client.get("/admin/stats", headers=admin.headers)
    assert r.status_code == 200
    stats = r.json()
    assert stats["total_posts"] >= 1
    assert stats["pending_posts"] >= 1
    assert stats["total_users"] >= 2


def test_new_post_at_reject_threshold_is_rejected_on_creation(client, use_policy, admin, make_user, make_post):
    use_policy(baseline=0)
    author = make_user()
    post = make_post(author)
    assert post["verification_score"] == 0
    assert post["status"] == "REJECTED"

    log = _log(client, admin, post["id"])
    assert [(e["action"], e["previous_status"], e["new_status"]) for e in log] == [
        ("AUTO_REJECT", "PENDING", "REJECTED")
    ]
    inbox = client.get("/notifications", headers=author.headers).json()
    assert [n["type"] for n in inbox["data"]] == ["POST_REJECTED"]


def test_new_post_meeting_approve_threshold_is_approved_on_creation(client, use_policy, admin, make_user, make_post):
    use_policy(auto_approve_score_threshold=50)
    post = make_post(make_user())
    assert post["status"] == "APPROVED"
    assert [e["action"] for e in _log(client, admin, post["id"])] == ["AUTO_APPROVE"]
