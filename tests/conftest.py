import uuid

import pytest
from fastapi.testclient import TestClient

from groupchat.database.supabase_client import get_supabase
from groupchat.main import app
from groupchat.modules.messages.store import message_clock
from tests.fakes import FakeSupabase


def _profile(name: str) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "email": f"{name}@acme.org",
        "full_name": name.title(),
        "avatar_url": None,
        "created_at": "2026-01-01T00:00:00+00:00",
    }


@pytest.fixture
def users():
    return {name: _profile(name) for name in ("alice", "bob", "carol")}


@pytest.fixture
def db(users):
    fake = FakeSupabase()
    fake.tables["user_profiles"] = list(users.values())
    return fake


@pytest.fixture(autouse=True)
def reset_clock():
    message_clock.reset()
    yield
    message_clock.reset()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_supabase] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def alice(users):
    return users["alice"]["id"]


@pytest.fixture
def bob(users):
    return users["bob"]["id"]


@pytest.fixture
def carol(users):
    return users["carol"]["id"]


@pytest.fixture
def create_group(client):
    def _create(admin: str, name: str = "Book club", is_public: bool = True) -> dict:
        res = client.post("/api/groups/create", json={"name": name, "admin": admin, "isPublic": is_public})
        assert res.status_code == 201, res.text
        return res.json()
    return _create
