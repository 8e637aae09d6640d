"""
Route-level tests against a mocked service.

These pin down what the HTTP layer passes to the service and how it renders
service errors, independent of how the service stores anything.
"""
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from api.dependencies import get_column_service
from conftest import bearer, payload
from core.errors import ServiceError
from core.interfaces import ColumnService
from infrastructure.database.connection import get_db

pytestmark = pytest.mark.asyncio


@pytest.fixture
def column_service() -> AsyncMock:
    service = AsyncMock(spec=ColumnService)
    service.list_columns.return_value = ([], 0)
    service.get_hot_columns.return_value = []
    return service


@pytest.fixture
async def mocked_client(column_service: AsyncMock, session_factory, users):
    from main import app

    # Callers are still resolved against stored users
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_column_service] = lambda: column_service
    app.state.limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def test_paging_is_normalized(mocked_client: AsyncClient, column_service: AsyncMock):
    data = payload(
        await mocked_client.get("/api/v3/columns", params={"page": "0", "page_size": "100"})
    )

    column_service.list_columns.assert_awaited_once_with(1, 10)
    assert data == {"columns": [], "total": 0, "page": 1, "page_size": 10}


async def test_hot_limit_passed_through(mocked_client: AsyncClient, column_service: AsyncMock):
    payload(await mocked_client.get("/api/v3/columns/hot", params={"limit": "5"}))
    column_service.get_hot_columns.assert_awaited_once_with(5)


async def test_unauthenticated_write_never_reaches_service(
    mocked_client: AsyncClient, column_service: AsyncMock
):
    response = await mocked_client.post("/api/v3/columns", json={"name": "Anything"})

    assert response.json() == {"code": 401, "message": "Not authenticated", "data": None}
    column_service.create_column.assert_not_called()


async def test_invalid_path_id(mocked_client: AsyncClient, column_service: AsyncMock):
    response = await mocked_client.get("/api/v3/columns/0")

    assert response.json()["code"] == 400
    column_service.get_column.assert_not_called()


async def test_service_errors_become_envelopes(
    mocked_client: AsyncClient, column_service: AsyncMock
):
    column_service.subscribe.side_effect = ServiceError.conflict("Already subscribed to this column")

    response = await mocked_client.post(
        "/api/v3/columns/3/subscribe", headers=bearer("user-reader")
    )

    assert response.status_code == 200
    assert response.json() == {
        "code": 409,
        "message": "Already subscribed to this column",
        "data": None,
    }
    column_service.subscribe.assert_awaited_once_with("user-reader", 3)


async def test_actor_role_reaches_service(
    mocked_client: AsyncClient, column_service: AsyncMock, make_user
):
    column_service.create_column.side_effect = ServiceError.invalid("Column limit reached (50)")
    headers = await make_user("user-vip", role="vip")

    response = await mocked_client.post("/api/v3/columns", headers=headers, json={"name": "Mine"})

    assert response.json()["code"] == 400
    actor_id, role, data = column_service.create_column.await_args.args
    assert (actor_id, role) == ("user-vip", "vip")
    assert data["name"] == "Mine"
