"""
DiscoverHealth Backend — Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:  Settings pointing at a throwaway SQLite file
    ├── database:       Database handle with all tables created
    ├── app:            FastAPI app built by create_app() on that database
    ├── test_client:    HTTPX AsyncClient talking to the app in-process
    ├── login:          Helper that signs up and logs in a user on a client
    ├── mock_*_dao:     AsyncMock DAOs for service unit tests
    └── fast_hasher:    PasswordHasher with a tiny round count
"""

import os

# Set BEFORE any discoverhealth import: config.settings is built at import time
os.environ.setdefault("SESSION_SECRET", "test-secret-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from discoverhealth.config import Settings
from discoverhealth.daos import ResourceDAO, ReviewDAO, SessionDAO, UserDAO
from discoverhealth.database import Database
from discoverhealth.services.security import PasswordHasher

TEST_SECRET = "test-secret-not-for-production"


# ══════════════════════════════════════════════════════════════════════════
# Storage & Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Isolated settings: per-test SQLite file, cheap hashing, no rate limiting in practice."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'discoverhealth_test.db'}",
        session_secret=TEST_SECRET,
        password_hash_rounds=1000,
        rate_limit_requests=100_000,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """Real SQLite database with the full schema; disposed after the test."""
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def app(test_settings, database):
    from discoverhealth.main import create_app
    return create_app(settings=test_settings, database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly into the app via ASGITransport.

    The client's cookie jar keeps the session cookie between requests,
    the same way a browser would.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def login():
    """Sign up (if needed) and log in; returns the login response."""
    async def _login(client, username="alice", password="longpassword1"):
        await client.post("/api/users/signup", json={"username": username, "password": password})
        response = await client.post(
            "/api/users/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200
        return response
    return _login


@pytest.fixture
def clinic_payload():
    return {
        "name": "Clinic A",
        "category": "Clinic",
        "country": "UK",
        "region": "Southampton",
        "lat": 50.9,
        "lon": -1.4,
    }


# ══════════════════════════════════════════════════════════════════════════
# Service Unit-Test Doubles
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_user_dao():
    return AsyncMock(spec=UserDAO)


@pytest.fixture
def mock_session_dao():
    return AsyncMock(spec=SessionDAO)


@pytest.fixture
def mock_resource_dao():
    return AsyncMock(spec=ResourceDAO)


@pytest.fixture
def mock_review_dao():
    return AsyncMock(spec=ReviewDAO)


@pytest.fixture
def fast_hasher():
    return PasswordHasher(rounds=1000)
