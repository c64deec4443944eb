"""Post CRUD and visibility tests."""


def _ids(response):
    return {p["id"] for p in response.json()["data"]}


def test_create_post_starts_pending_at_baseline(client, make_user, make_post):
    author = make_user()
    post = make_post(author)
    assert post["status"] == "PENDING"
    assert post["verification_score"] == 50
    assert post["report_count"] == 0
    assert post["up_votes"] == 0
    assert post["my_vote"] is None
    assert post["author_name"] == "Test User"


def test_create_post_requires_auth(client):
    r = client.post("/posts", json={"title": "x"})
    assert r.status_code == 401


def test_pending_post_hidden_from_anonymous_and_others(client, make_user, make_post, admin):
    author = make_user()
    other = make_user()
    post = make_post(author)

    assert post["id"] not in _ids(client.get("/posts", params={"limit": 100}))
    assert post["id"] not in _ids(client.get("/posts", headers=other.headers, params={"limit": 100}))
    assert post["id"] in _ids(client.get("/posts", headers=author.headers, params={"author_id": author.id}))
    assert post["id"] in _ids(client.get("/posts", headers=admin.headers, params={"author_id": author.id}))


def test_approved_post_visible_to_everyone(client, make_user, make_post, admin):
    author = make_user()
    post = make_post(author)
    r = client.patch(f"/admin/posts/{post['id']}/status", headers=admin.headers, json={"status": "APPROVED"})
    assert r.status_code == 200

    listing = client.get("/posts", params={"author_id": author.id})
    assert listing.status_code == 200
    assert post["id"] in _ids(listing)
    assert listing.json()["meta"]["total"] == 1


def test_list_filters_and_search(client, make_user, make_post):
    author = make_user()
    make_post(author, district="Chattogram", division="Chattogram", title="Bicycle stolen")
    make_post(author, district="Sylhet", division="Sylhet", title="Shop window broken")

    r = client.get("/posts", headers=author.headers, params={"author_id": author.id, "district": "Sylhet"})
    assert [p["title"] for p in r.json()["data"]] == ["Shop window broken"]

    r = client.get("/posts", headers=author.headers, params={"author_id": author.id, "search_term": "bicycle"})
    assert [p["district"] for p in r.json()["data"]] == ["Chattogram"]


def test_update_post_owner_only(client, make_user, make_post):
    author = make_user()
    stranger = make_user()
    post = make_post(author)

    r = client.patch(f"/posts/{post['id']}", headers=stranger.headers, json={"title": "Hijacked"})
    assert r.status_code == 403

    r = client.patch(f"/posts/{post['id']}", headers=author.headers, json={"title": "Updated title"})
    assert r.status_code == 200
    assert r.json()["title"] == "Updated title"
    assert r.json()["status"] == "PENDING"


def test_update_post_with_no_fields_is_rejected(client, make_user, make_post):
    author = make_user()
    post = make_post(author)
    r = client.patch(f"/posts/{post['id']}", headers=author.headers, json={})
    assert r.status_code == 400


def test_delete_post_soft_deletes(client, make_user, make_post):
    author = make_user()
    post = make_post(author)

    r = client.delete(f"/posts/{post['id']}", headers=author.headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Post deleted successfully"}

    assert client.get(f"/posts/{post['id']}").status_code == 404
    assert client.post(f"/posts/{post['id']}/upvote", headers=author.headers).status_code == 404


def test_get_missing_post(client):
    r = client.get("/posts/999999")
    assert r.status_code == 404
    assert r.json()["errorSources"] == [{"path": "post_id", "message": "Post not found"}]
