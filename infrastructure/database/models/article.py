"""
Article database models: articles, bodies, revisions, drafts, categories and topics.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from core.domain.content import (
    ArticleContentType,
    ArticleStatus,
    ArticleVisibility,
    HistoryChangeType,
)

from .base import Base, BigIntId, TimestampMixin, utcnow


class Article(Base, TimestampMixin):
    """Published article metadata. The body lives in ArticleContent."""

    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)

    # Owner (opaque user identifier)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    content_type: Mapped[int] = mapped_column(
        SmallInteger, default=ArticleContentType.TEXT.value, nullable=False
    )

    # Classification (0 = none)
    category_id: Mapped[int] = mapped_column(BigIntId, default=0, nullable=False, index=True)
    column_id: Mapped[int] = mapped_column(BigIntId, default=0, nullable=False, index=True)
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    topics: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    status: Mapped[int] = mapped_column(
        SmallInteger, default=ArticleStatus.PUBLISHED.value, nullable=False, index=True
    )
    visibility: Mapped[int] = mapped_column(
        SmallInteger, default=ArticleVisibility.PUBLIC.value, nullable=False
    )
    allow_comment: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Counters
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    comment_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    share_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    favorite_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    hot_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False, index=True)

    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_hot: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # SEO
    keywords: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Paid content
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0, nullable=False)

    publish_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Article(id={self.id}, title={self.title[:30]})>"


class ArticleContent(Base, TimestampMixin):
    """Markdown body of an article and its rendered HTML."""

    __tablename__ = "article_contents"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_html: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    word_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    read_time: Mapped[int] = mapped_column(Integer, default=1, nullable=False)  # minutes


class ArticleHistory(Base):
    """One revision of an article."""

    __tablename__ = "article_histories"
    __table_args__ = (UniqueConstraint("article_id", "version", name="uq_article_history_version"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    change_type: Mapped[int] = mapped_column(
        SmallInteger, default=HistoryChangeType.EDIT.value, nullable=False
    )
    change_reason: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    operator_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class ArticleDraft(Base, TimestampMixin):
    """Unpublished article state owned by one user."""

    __tablename__ = "article_drafts"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    article_id: Mapped[int] = mapped_column(BigIntId, default=0, nullable=False)

    title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    category_id: Mapped[int] = mapped_column(BigIntId, default=0, nullable=False)
    column_id: Mapped[int] = mapped_column(BigIntId, default=0, nullable=False)
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    topics: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    auto_save_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    last_edit_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=True
    )
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Category(Base, TimestampMixin):
    """Node of the category tree (parent_id 0 = root)."""

    __tablename__ = "article_categories"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    parent_id: Mapped[int] = mapped_column(BigIntId, default=0, nullable=False, index=True)
    icon: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    article_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_show: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Topic(Base, TimestampMixin):
    """Named grouping that articles can be tagged into and users can follow."""

    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    article_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    follow_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    hot_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    is_hot: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    creator_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[int] = mapped_column(SmallInteger, default=1, nullable=False)


class ArticleTopic(Base):
    """Article <-> topic relation."""

    __tablename__ = "article_topics"
    __table_args__ = (UniqueConstraint("article_id", "topic_id", name="uq_article_topic"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    topic_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class TopicFollow(Base):
    """A user following a topic."""

    __tablename__ = "topic_follows"
    __table_args__ = (UniqueConstraint("user_id", "topic_id", name="uq_topic_follow"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    topic_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
