"""Shared fixtures: a fresh SQLite file per test and an ASGI test client.

Invariants:
    - Every test gets its own database file under ``tmp_path``
    - ``init_db`` runs before each test (ASGITransport skips lifespan)
    - Users are inserted directly through ``store`` so tests can set
      balance, contributor and backer records without admin calls
"""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from guild_hall_api.app.core.config import settings
from guild_hall_api.app.core.db import get_cursor, init_db
from guild_hall_api.app.core.security import create_access_token
from guild_hall_api.app.main import app
from guild_hall_api.app.services import store


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "guild_hall_test.db"))
    init_db()
    yield


@pytest.fixture
async def client():
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def make_user():
    """Factory inserting a user and returning its ``UserRecord``."""

    def _make(name="alice", **fields):
        user = store.UserRecord(
            id=str(uuid.uuid4()),
            email=f"{name}-{uuid.uuid4().hex[:8]}@example.com",
            name=name,
            **fields,
        )
        with get_cursor() as cursor:
            store.insert_user(cursor, user)
        return user

    return _make


@pytest.fixture
def auth():
    """Return bearer headers for a user."""

    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}

    return _headers


@pytest.fixture
def load_user():
    """Re-read a user record straight from the database."""

    def _load(user_id):
        with get_cursor() as cursor:
            return store.fetch_user(cursor, user_id)

    return _load
