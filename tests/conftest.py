"""Shared test fixtures for SecureVote."""

import os
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient


JWT_SECRET = "test-jwt-secret-for-unit-tests"
ADMIN_EMAIL = "admin@securevote.test"
ADMIN_PASSWORD = "Adm1n!pass"
VOTER_PASSWORD = "Aa1!aaaa"


@pytest.fixture
def app():
    """Create a test app with in-memory DB."""
    os.environ["SECUREVOTE_DB_URL"] = "sqlite+aiosqlite://"
    os.environ["SECUREVOTE_JWT_SECRET"] = JWT_SECRET
    os.environ["SECUREVOTE_ENVIRONMENT"] = "development"

    # Clear caches and singletons so new env vars take effect
    from securevote.common.config import get_settings
    get_settings.cache_clear()

    from securevote.deps import reset_singletons
    reset_singletons()

    from securevote.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from securevote.deps import get_db
    db = get_db()
    await db.init()
    await db.migrate()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


@pytest.fixture
async def admin_headers(client):
    """Bearer headers for a bootstrap admin created directly in the store."""
    from securevote.deps import get_db, get_user_service
    await get_db().run(get_user_service().ensure_admin, ADMIN_EMAIL, ADMIN_PASSWORD)
    resp = await client.post("/api/auth/login", json={
        "email": ADMIN_EMAIL, "password": ADMIN_PASSWORD,
    })
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def register_voter(client):
    """Factory: register a voter and return its bearer headers."""
    async def _register(email: str = "voter@example.com") -> dict:
        resp = await client.post("/api/auth/register", json={
            "email": email, "password": VOTER_PASSWORD, "fullName": "Test Voter",
        })
        assert resp.status_code == 201
        return {"Authorization": f"Bearer {resp.json()['token']}"}
    return _register


@pytest.fixture
async def voter_headers(register_voter):
    return await register_voter()


def iso(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).isoformat()


@pytest.fixture
def create_election(client, admin_headers):
    """Factory: create an election whose window is relative to now."""
    async def _create(*, start: timedelta, end: timedelta,
                      status: str = "active", title: str = "Board Election") -> dict:
        resp = await client.post("/api/elections", json={
            "title": title,
            "description": "Annual board seats",
            "startDate": iso(start),
            "endDate": iso(end),
            "status": status,
        }, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _create
