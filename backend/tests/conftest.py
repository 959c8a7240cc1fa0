"""
Notebox Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── settings: Settings pointing at a throwaway SQLite file
    ├── app: Application built by create_app(settings), tables created
    ├── test_client: HTTPX AsyncClient bound to `app` through ASGITransport
    └── token_service: TokenService sharing the app's secret
"""

import os
from typing import AsyncGenerator, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE notebox.main is imported: it builds a module-level app from the
# environment.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./notebox_test.db"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from notebox.config import Settings  # noqa: E402
from notebox.main import create_app  # noqa: E402
from notebox.services.token_service import TokenService  # noqa: E402

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


# ══════════════════════════════════════════════════════════════════════════
# Unit Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    An AsyncMock that simulates AsyncSession behavior.
    How:     Mocks execute, flush, commit, rollback, and close methods.

    Usage:
        async def test_get_note(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
            result = await note_service.get_note(mock_db_session, 1, 7)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Integration Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings for one test: private SQLite file, rate limiting off."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notebox.db'}",
        jwt_secret=TEST_SECRET,
        log_level="WARNING",
        rate_limit_enabled=False,
    )


@pytest_asyncio.fixture
async def app(settings):
    """
    Application with its schema created.

    ASGITransport does not run the lifespan, so tables are created here and
    the engine is disposed on teardown.
    """
    application = create_app(settings)
    await application.state.db.create_all()
    yield application
    await application.state.db.dispose()


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an HTTPX AsyncClient for testing API endpoints.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def token_service(settings) -> TokenService:
    return TokenService.from_settings(settings)


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register_and_login(
    client: AsyncClient,
    username: str = "alice",
    password: str = "secret123",
) -> Dict[str, str]:
    """Register a user, log in, and return the Authorization header for them."""
    response = await client.post(
        "/api/register", json={"username": username, "password": password}
    )
    assert response.status_code == 201, response.text

    response = await client.post(
        "/api/login", json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.text
    return auth_header(response.json()["token"])
