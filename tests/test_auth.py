"""Auth flow tests."""

from conftest import unique


def _register(client, email, password="pass", name="Reporter"):
    return client.post("/auth/register", json={"email": email, "password": password, "name": name})


def test_register_login_me(client):
    email = f"auth_{unique()}@test.com"
    r = _register(client, email)
    assert r.status_code == 201
    assert r.json()["role"] == "USER"

    token = client.post("/auth/login", json={"email": email, "password": "pass"}).json()["access_token"]
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == email
    assert me.json()["name"] == "Reporter"


def test_register_duplicate_email_conflicts(client):
    email = f"dup_{unique()}@test.com"
    assert _register(client, email).status_code == 201
    r = _register(client, email)
    assert r.status_code == 409
    body = r.json()
    assert body["success"] is False
    assert body["errorSources"] == [{"path": "email", "message": "Email already registered"}]


def test_login_wrong_password(client):
    email = f"wrong_{unique()}@test.com"
    _register(client, email)
    r = client.post("/auth/login", json={"email": email, "password": "nope"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


def test_me_requires_token(client):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.json()["message"] == "Not authenticated"


def test_me_rejects_garbage_token(client):
    r = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired token"
