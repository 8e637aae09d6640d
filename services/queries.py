"""
Query helpers shared by the service implementations.
"""

from typing import Any, Iterable, Sequence

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from core.domain.content import ArticleSummary
from infrastructure.database.models import Article, User


def escape_like(value: str) -> str:
    """Escape LIKE wildcards for safe use in SQL LIKE/ILIKE patterns."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def decremented(column: Any, by: int = 1) -> Any:
    """SQL expression for ``column - by`` that never goes below zero."""
    return case((column > by, column - by), else_=0)


async def count_rows(db: AsyncSession, query: Select) -> int:
    """Row count of ``query`` before ordering and paging."""
    result = await db.execute(select(func.count()).select_from(query.order_by(None).subquery()))
    return result.scalar() or 0


async def fetch_page(
    db: AsyncSession, query: Select, page: int, page_size: int
) -> tuple[list[Any], int]:
    """Execute ``query`` for one page and return ``(rows, total)``."""
    total = await count_rows(db, query)
    result = await db.execute(query.offset((page - 1) * page_size).limit(page_size))
    return list(result.scalars().all()), total


async def fetch_users(db: AsyncSession, user_ids: Iterable[str]) -> dict[str, User]:
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in result.scalars().all()}


async def summarize(db: AsyncSession, articles: Sequence[Article]) -> list[ArticleSummary]:
    """Pair each article with its author, preserving order."""
    authors = await fetch_users(db, (a.user_id for a in articles))
    return [ArticleSummary(article=a, author=authors.get(a.user_id)) for a in articles]
