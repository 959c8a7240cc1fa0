"""
Notebox Backend — Middleware Tests
====================================

What:  Tests for the rate limiter and request-id propagation.

What we test:
    ✅ Requests past the limit on /api/login get 429 with Retry-After
    ✅ Unlimited paths are never throttled
    ✅ X-Request-ID is generated, or echoed when the client supplies one
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notebox.main import create_app


@pytest_asyncio.fixture
async def limited_client(settings):
    """Client for an app that allows two credential requests per minute."""
    limited = settings.model_copy(
        update={"rate_limit_enabled": True, "rate_limit_requests": 2, "rate_limit_window": 60}
    )
    app = create_app(limited)
    await app.state.db.create_all()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await app.state.db.dispose()


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_login_throttled_after_limit(self, limited_client):
        credentials = {"username": "nobody", "password": "secret123"}

        for _ in range(2):
            response = await limited_client.post("/api/login", json=credentials)
            assert response.status_code == 401

        response = await limited_client.post("/api/login", json=credentials)
        assert response.status_code == 429
        body = response.json()
        assert body["code"] == "rate_limit_exceeded"
        assert "error" in body
        assert int(response.headers["Retry-After"]) >= 1

    @pytest.mark.asyncio
    async def test_throttled_response_carries_request_id(self, limited_client):
        credentials = {"username": "nobody", "password": "secret123"}
        for _ in range(2):
            await limited_client.post("/api/login", json=credentials)

        response = await limited_client.post(
            "/api/login", json=credentials, headers={"X-Request-ID": "throttled-1"}
        )
        assert response.status_code == 429
        assert response.headers["X-Request-ID"] == "throttled-1"
        assert response.json()["request_id"] == "throttled-1"

    @pytest.mark.asyncio
    async def test_other_paths_not_throttled(self, limited_client):
        for _ in range(5):
            response = await limited_client.get("/api/notes")
            assert response.status_code == 401


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, test_client):
        response = await test_client.get("/health")
        assert response.headers.get("X-Request-ID")

    @pytest.mark.asyncio
    async def test_client_value_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    @pytest.mark.asyncio
    async def test_included_in_error_body(self, test_client):
        response = await test_client.get("/api/notes", headers={"X-Request-ID": "trace-1"})
        assert response.status_code == 401
        assert response.json()["request_id"] == "trace-1"
