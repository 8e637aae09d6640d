"""
Column service: collections, ordered membership and subscriptions.
"""

import logging
from typing import Any, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.content import (
    ArticleStatus,
    ArticleSummary,
    ArticleVisibility,
    ColumnDetail,
    ColumnSortType,
    ColumnStatus,
)
from core.errors import ServiceError
from core.interfaces import ColumnService
from infrastructure.config.settings import settings
from infrastructure.database.models import (
    Article,
    ArticleColumn,
    ColumnArticle,
    ColumnSubscription,
    User,
    UserRole,
)

from .queries import count_rows, decremented, fetch_page, summarize

logger = logging.getLogger(__name__)

HOT_COLUMNS_DEFAULT = 10
HOT_COLUMNS_MAX = 20

_ELEVATED_ROLES = (UserRole.VIP.value, UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value)

_ARTICLE_ORDER = {
    ColumnSortType.CUSTOM: (ColumnArticle.sort_order.asc(), ColumnArticle.added_at.asc()),
    ColumnSortType.TIME_ASC: (Article.publish_time.asc(),),
    ColumnSortType.TIME_DESC: (Article.publish_time.desc(),),
}

_UPDATABLE_FIELDS = ("name", "description", "cover_image", "sort_type", "is_finished")


def column_limit(role: Optional[str]) -> int:
    """How many columns a user with ``role`` may own."""
    if role in _ELEVATED_ROLES:
        return settings.max_columns_per_vip
    return settings.max_columns_per_user


class SqlColumnService(ColumnService):
    """ColumnService over an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_column(self, column_id: int) -> ArticleColumn:
        """A visible column, else NotFound."""
        column = await self.db.get(ArticleColumn, column_id)
        if not column or column.status != ColumnStatus.NORMAL.value:
            raise ServiceError.not_found("Column not found")
        return column

    async def _get_owned_column(self, actor_id: str, column_id: int) -> ArticleColumn:
        column = await self._get_column(column_id)
        if column.user_id != actor_id:
            logger.warning("User %s tried to modify column %s", actor_id, column_id)
            raise ServiceError.forbidden("You can only manage your own columns")
        return column

    async def _get_membership(self, column_id: int, article_id: int) -> Optional[ColumnArticle]:
        result = await self.db.execute(
            select(ColumnArticle).where(
                ColumnArticle.column_id == column_id, ColumnArticle.article_id == article_id
            )
        )
        return result.scalar_one_or_none()

    async def _is_subscribed(self, user_id: str, column_id: int) -> bool:
        result = await self.db.execute(
            select(ColumnSubscription.id).where(
                ColumnSubscription.user_id == user_id,
                ColumnSubscription.column_id == column_id,
            )
        )
        return result.scalar_one_or_none() is not None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_columns(self, page: int, page_size: int) -> tuple[list[ArticleColumn], int]:
        query = (
            select(ArticleColumn)
            .where(ArticleColumn.status == ColumnStatus.NORMAL.value)
            .order_by(ArticleColumn.created_at.desc(), ArticleColumn.id.desc())
        )
        return await fetch_page(self.db, query, page, page_size)

    async def get_hot_columns(self, limit: int) -> list[ArticleColumn]:
        if limit <= 0 or limit > HOT_COLUMNS_MAX:
            limit = HOT_COLUMNS_DEFAULT
        result = await self.db.execute(
            select(ArticleColumn)
            .where(ArticleColumn.status == ColumnStatus.NORMAL.value)
            .order_by(
                ArticleColumn.subscriber_count.desc(),
                ArticleColumn.article_count.desc(),
                ArticleColumn.id.asc(),
            )
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_subscribed_columns(
        self, actor_id: str, page: int, page_size: int
    ) -> tuple[list[ArticleColumn], int]:
        query = (
            select(ArticleColumn)
            .join(ColumnSubscription, ColumnSubscription.column_id == ArticleColumn.id)
            .where(
                ColumnSubscription.user_id == actor_id,
                ArticleColumn.status == ColumnStatus.NORMAL.value,
            )
            .order_by(ColumnSubscription.created_at.desc(), ColumnSubscription.id.desc())
        )
        return await fetch_page(self.db, query, page, page_size)

    async def list_user_columns(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[ArticleColumn], int]:
        query = (
            select(ArticleColumn)
            .where(
                ArticleColumn.user_id == user_id,
                ArticleColumn.status == ColumnStatus.NORMAL.value,
            )
            .order_by(ArticleColumn.created_at.desc(), ArticleColumn.id.desc())
        )
        return await fetch_page(self.db, query, page, page_size)

    async def get_column(self, column_id: int, viewer_id: Optional[str]) -> ColumnDetail:
        column = await self._get_column(column_id)
        author = await self.db.get(User, column.user_id)
        is_subscribed = False
        if viewer_id:
            is_subscribed = await self._is_subscribed(viewer_id, column_id)
        return ColumnDetail(
            column=column,
            author=author,
            article_count=column.article_count,
            is_subscribed=is_subscribed,
        )

    async def list_column_articles(
        self, column_id: int, page: int, page_size: int
    ) -> tuple[list[ArticleSummary], int]:
        column = await self._get_column(column_id)
        order = _ARTICLE_ORDER.get(column.sort_type, _ARTICLE_ORDER[ColumnSortType.CUSTOM])

        query = (
            select(Article)
            .join(ColumnArticle, ColumnArticle.article_id == Article.id)
            .where(
                ColumnArticle.column_id == column_id,
                Article.status == ArticleStatus.PUBLISHED.value,
                Article.visibility == ArticleVisibility.PUBLIC.value,
                Article.deleted_at.is_(None),
            )
            .order_by(*order, Article.id.asc())
        )
        articles, total = await fetch_page(self.db, query, page, page_size)
        return await summarize(self.db, articles), total

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_column(
        self, actor_id: str, role: Optional[str], data: dict[str, Any]
    ) -> ArticleColumn:
        owned = await count_rows(
            self.db,
            select(ArticleColumn.id).where(
                ArticleColumn.user_id == actor_id,
                ArticleColumn.status == ColumnStatus.NORMAL.value,
            ),
        )
        limit = column_limit(role)
        if owned >= limit:
            raise ServiceError.invalid(f"Column limit reached ({limit})")

        column = ArticleColumn(
            user_id=actor_id,
            status=ColumnStatus.NORMAL.value,
            article_count=0,
            subscriber_count=0,
            **data,
        )
        self.db.add(column)
        await self.db.commit()
        await self.db.refresh(column)

        logger.info("Column %s created by %s", column.id, actor_id)
        return column

    async def update_column(
        self, actor_id: str, column_id: int, data: dict[str, Any]
    ) -> ArticleColumn:
        column = await self._get_owned_column(actor_id, column_id)
        for field, value in data.items():
            if field in _UPDATABLE_FIELDS and value is not None:
                setattr(column, field, value)
        await self.db.commit()
        await self.db.refresh(column)
        return column

    async def delete_column(self, actor_id: str, column_id: int) -> None:
        column = await self._get_owned_column(actor_id, column_id)
        column.status = ColumnStatus.HIDDEN.value
        await self.db.commit()
        logger.info("Column %s hidden by %s", column_id, actor_id)

    async def subscribe(self, actor_id: str, column_id: int) -> None:
        column = await self._get_column(column_id)
        if column.user_id == actor_id:
            raise ServiceError.invalid("You cannot subscribe to your own column")
        if await self._is_subscribed(actor_id, column_id):
            raise ServiceError.conflict("Already subscribed to this column")

        self.db.add(ColumnSubscription(column_id=column_id, user_id=actor_id))
        await self.db.execute(
            update(ArticleColumn)
            .where(ArticleColumn.id == column_id)
            .values(subscriber_count=ArticleColumn.subscriber_count + 1)
        )
        await self.db.commit()
        logger.info("User %s subscribed to column %s", actor_id, column_id)

    async def unsubscribe(self, actor_id: str, column_id: int) -> None:
        await self._get_column(column_id)
        result = await self.db.execute(
            delete(ColumnSubscription).where(
                ColumnSubscription.user_id == actor_id,
                ColumnSubscription.column_id == column_id,
            )
        )
        if not result.rowcount:
            raise ServiceError.invalid("Not subscribed to this column")

        await self.db.execute(
            update(ArticleColumn)
            .where(ArticleColumn.id == column_id)
            .values(subscriber_count=decremented(ArticleColumn.subscriber_count))
        )
        await self.db.commit()
        logger.info("User %s unsubscribed from column %s", actor_id, column_id)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    async def add_article(
        self, actor_id: str, column_id: int, article_id: int, sort_order: int = 0
    ) -> None:
        await self._get_owned_column(actor_id, column_id)

        article = await self.db.get(Article, article_id)
        if not article or article.deleted_at is not None:
            raise ServiceError.not_found("Article not found")
        if article.user_id != actor_id:
            raise ServiceError.forbidden("You can only add your own articles")
        if await self._get_membership(column_id, article_id):
            raise ServiceError.conflict("Article is already in this column")

        self.db.add(ColumnArticle(column_id=column_id, article_id=article_id, sort_order=sort_order))
        article.column_id = column_id
        await self.db.execute(
            update(ArticleColumn)
            .where(ArticleColumn.id == column_id)
            .values(article_count=ArticleColumn.article_count + 1)
        )
        await self.db.commit()
        logger.info("Article %s added to column %s", article_id, column_id)

    async def remove_article(self, actor_id: str, column_id: int, article_id: int) -> None:
        await self._get_owned_column(actor_id, column_id)
        membership = await self._get_membership(column_id, article_id)
        if not membership:
            raise ServiceError.not_found("Article is not in this column")

        await self.db.delete(membership)
        article = await self.db.get(Article, article_id)
        if article and article.column_id == column_id:
            article.column_id = 0
        await self.db.execute(
            update(ArticleColumn)
            .where(ArticleColumn.id == column_id)
            .values(article_count=decremented(ArticleColumn.article_count))
        )
        await self.db.commit()
        logger.info("Article %s removed from column %s", article_id, column_id)

    async def update_article_position(
        self, actor_id: str, column_id: int, article_id: int, sort_order: int
    ) -> None:
        await self._get_owned_column(actor_id, column_id)
        membership = await self._get_membership(column_id, article_id)
        if not membership:
            raise ServiceError.not_found("Article is not in this column")
        membership.sort_order = sort_order
        await self.db.commit()
