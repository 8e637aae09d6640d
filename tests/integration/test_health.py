"""Tests for health probes and the HTTP middleware stack."""
import uuid

import pytest
from httpx import AsyncClient

from conftest import bearer, payload
from infrastructure.config.settings import settings

pytestmark = pytest.mark.asyncio

HEALTH = "/api/v3/health"


class TestHealth:
    async def test_health_check(self, async_client: AsyncClient):
        response = await async_client.get(HEALTH)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == settings.app_version
        assert data["environment"] == "test"
        assert "timestamp" in data

    async def test_database_check(self, async_client: AsyncClient):
        data = (await async_client.get(f"{HEALTH}/db")).json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"

    async def test_readiness_without_redis(self, async_client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "redis_url", None)
        data = (await async_client.get(f"{HEALTH}/ready")).json()
        assert data == {"ready": True, "database": "ok", "redis": "unconfigured"}

    async def test_liveness(self, async_client: AsyncClient):
        assert (await async_client.get(f"{HEALTH}/live")).json() == {"alive": True}


class TestMiddleware:
    async def test_request_id_is_generated(self, async_client: AsyncClient):
        response = await async_client.get(f"{HEALTH}/live")
        uuid.UUID(response.headers["X-Request-ID"])

    async def test_valid_request_id_is_echoed(self, async_client: AsyncClient):
        request_id = str(uuid.uuid4())
        response = await async_client.get(
            f"{HEALTH}/live", headers={"X-Request-ID": request_id}
        )
        assert response.headers["X-Request-ID"] == request_id

    async def test_invalid_request_id_is_replaced(self, async_client: AsyncClient):
        response = await async_client.get(
            f"{HEALTH}/live", headers={"X-Request-ID": "not-a-uuid"}
        )
        assert response.headers["X-Request-ID"] != "not-a-uuid"
        uuid.UUID(response.headers["X-Request-ID"])

    async def test_security_headers(self, async_client: AsyncClient):
        response = await async_client.get(f"{HEALTH}/live")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert response.headers["X-Response-Time"].endswith("ms")

    async def test_oversized_body(
        self, async_client: AsyncClient, author_headers: dict, monkeypatch
    ):
        monkeypatch.setattr(settings, "max_request_body_bytes", 16)
        response = await async_client.post(
            "/api/v3/articles",
            headers=author_headers,
            json={"title": "Too big", "content": "x" * 64},
        )
        assert response.status_code == 200
        assert response.json()["code"] == 413

    async def test_validation_message_names_field(
        self, async_client: AsyncClient, author_headers: dict
    ):
        response = await async_client.post(
            "/api/v3/articles", headers=author_headers, json={"content": "No title given here"}
        )
        body = response.json()
        assert body["code"] == 400
        assert body["message"].startswith("title:")

    async def test_token_query_parameter(self, async_client: AsyncClient, users):
        token = bearer("user-reader")["Authorization"].split(" ", 1)[1]
        response = await async_client.get(
            "/api/v3/comments/my-stats", params={"token": token}
        )
        assert payload(response)["total_comments"] == 0

    async def test_invalid_token_is_anonymous(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/v3/comments/my-stats", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.json()["code"] == 401


class TestRateLimiting:
    async def test_report_limit(
        self, async_client: AsyncClient, article_id: int, reader_headers: dict, make_user
    ):
        comment = payload(
            await async_client.post(
                "/api/v3/comments/root",
                headers=reader_headers,
                json={"target_type": 1, "target_id": article_id, "content": "Report me please"},
            )
        )
        url = f"/api/v3/comments/{comment['id']}/report"

        for n in range(10):
            headers = await make_user(f"user-{n}")
            payload(await async_client.post(url, headers=headers, json={"reason_type": 1}))

        late = await make_user("user-late")
        response = await async_client.post(url, headers=late, json={"reason_type": 1})
        assert response.status_code == 200
        body = response.json()
        assert body["code"] == 429
        assert body["message"].startswith("Rate limit exceeded")
