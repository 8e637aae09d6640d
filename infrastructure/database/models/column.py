"""
Column database models: curated article collections and their subscribers.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from core.domain.content import ColumnSortType, ColumnStatus

from .base import Base, BigIntId, TimestampMixin, utcnow


class ArticleColumn(Base, TimestampMixin):
    """An ordered, user-owned collection of articles."""

    __tablename__ = "article_columns"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    article_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    subscriber_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
    is_finished: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    sort_type: Mapped[int] = mapped_column(
        SmallInteger, default=ColumnSortType.CUSTOM.value, nullable=False
    )
    status: Mapped[int] = mapped_column(
        SmallInteger, default=ColumnStatus.NORMAL.value, nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<ArticleColumn(id={self.id}, name={self.name})>"


class ColumnArticle(Base):
    """Membership of an article in a column, with its sort position."""

    __tablename__ = "column_articles"
    __table_args__ = (UniqueConstraint("column_id", "article_id", name="uq_column_article"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    column_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("article_columns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    article_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class ColumnSubscription(Base):
    """A user subscribed to a column."""

    __tablename__ = "column_subscriptions"
    __table_args__ = (UniqueConstraint("column_id", "user_id", name="uq_column_subscription"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    column_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("article_columns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
