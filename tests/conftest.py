"""
Pytest configuration and shared fixtures for API tests.
"""

import os
import sys
from pathlib import Path

# Add project root to path for imports
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings are read once at import time, so configure them first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-0123456789abcdef")

import pytest
from typing import Any, AsyncGenerator

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import after path is set
from api.dependencies import token_service
from infrastructure.database.connection import get_db
from infrastructure.database.models import Base, Category, User
from services import SqlArticleService, SqlColumnService

# Database URL for testing (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

AUTHOR_ID = "user-author"
READER_ID = "user-reader"
ADMIN_ID = "user-admin"

ARTICLE_BODY = "# Getting started\n\nA long enough markdown body for publishing."


def bearer(user_id: str, role: str = "user") -> dict:
    """Authorization header carrying a freshly signed access token."""
    token = token_service.create_access_token(user_id=user_id, role=role)
    return {"Authorization": f"Bearer {token}"}


def payload(response) -> dict[str, Any]:
    """Unwrap the envelope of a response that must have succeeded."""
    assert response.status_code == 200
    body = response.json()
    assert body["code"] == 200, body["message"]
    return body["data"]


@pytest.fixture
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and inspecting data outside of requests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def users(db_session: AsyncSession) -> dict[str, User]:
    """An article author, a reader and an admin."""
    created = {
        "author": User(id=AUTHOR_ID, username="ada", avatar="https://cdn.test/ada.png"),
        "reader": User(id=READER_ID, username="grace"),
        "admin": User(id=ADMIN_ID, username="root", role="admin"),
    }
    db_session.add_all(created.values())
    await db_session.commit()
    return created


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Store an extra user and return headers for them."""

    async def _make(user_id: str, role: str = "user") -> dict:
        db_session.add(User(id=user_id, username=user_id, role=role))
        await db_session.commit()
        return bearer(user_id, role=role)

    return _make


@pytest.fixture
def author_headers(users) -> dict:
    return bearer(AUTHOR_ID)


@pytest.fixture
def reader_headers(users) -> dict:
    return bearer(READER_ID)


@pytest.fixture
def admin_headers(users) -> dict:
    return bearer(ADMIN_ID, role="admin")


@pytest.fixture
async def category(db_session: AsyncSession) -> int:
    row = Category(name="Engineering", parent_id=0, sort_order=1, is_show=True)
    db_session.add(row)
    await db_session.commit()
    return row.id


@pytest.fixture
async def article_id(db_session: AsyncSession, users, category: int) -> int:
    """A published public article owned by the author."""
    article = await SqlArticleService(db_session).create_article(
        AUTHOR_ID,
        {
            "title": "Async Python in practice",
            "summary": "Event loops and sessions",
            "content": ARTICLE_BODY,
            "category_id": category,
            "tags": ["python"],
            "topics": ["asyncio"],
        },
    )
    return article.id


@pytest.fixture
async def column_id(db_session: AsyncSession, users) -> int:
    """A column owned by the author."""
    column = await SqlColumnService(db_session).create_column(
        AUTHOR_ID, "user", {"name": "Backend Notes", "description": "Server-side writing"}
    )
    return column.id


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    # Import app here to avoid circular imports
    from main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    # Reset rate limiter state between tests to prevent cross-test 429s
    app.state.limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
