"""Pytest fixtures."""

import os
import uuid
from dataclasses import dataclass

# Must be set before warden is imported: settings and the engine are module-level.
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_warden.db")
os.environ.setdefault("ENV", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from warden import models  # noqa: E402,F401 - register for create_all
from warden.core.moderation_policy import ModerationPolicy, get_policy  # noqa: E402
from warden.core.security import create_access_token  # noqa: E402
from warden.db.base import Base  # noqa: E402
from warden.db.session import engine, get_db  # noqa: E402
from warden.main import app  # noqa: E402
from warden.models.enums import UserRole  # noqa: E402
from warden.services.auth_service import create_user  # noqa: E402

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

POST_PAYLOAD = {
    "title": "Phone snatched near the station",
    "description": "Two men on a motorbike grabbed a phone outside gate 3.",
    "location": "Kamalapur Railway Station",
    "district": "Dhaka",
    "division": "Dhaka",
    "crime_date": "2026-10-01T18:30:00Z",
    "category": "ROBBERY",
}


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def unique() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class Account:
    id: int
    email: str
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture(scope="session")
def setup_db():
    """Create tables once for test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(setup_db):
    """Test client with overridden DB."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db(setup_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    """Create a user directly in the DB and hand back a bearer token for it."""

    def _make(role: UserRole = UserRole.USER, name: str = "Test User") -> Account:
        email = f"{role.value.lower()}_{unique()}@test.com"
        user = create_user(db, email=email, password="pass", name=name, role=role)
        return Account(id=user.id, email=email, token=create_access_token(subject=email, role=user.role))

    return _make


@pytest.fixture
def admin(make_user) -> Account:
    return make_user(UserRole.ADMIN, name="Admin")


@pytest.fixture
def make_post(client):
    def _make(author: Account, **overrides) -> dict:
        r = client.post("/posts", headers=author.headers, json={**POST_PAYLOAD, **overrides})
        assert r.status_code == 201, r.json()
        return r.json()

    return _make


@pytest.fixture
def use_policy(client):
    """Swap the moderation policy for the duration of a test."""

    def _use(**overrides) -> ModerationPolicy:
        policy = ModerationPolicy(**overrides)
        app.dependency_overrides[get_policy] = lambda: policy
        return policy

    yield _use
    app.dependency_overrides.pop(get_policy, None)
