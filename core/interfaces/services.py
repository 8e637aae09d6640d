"""Service interfaces consumed by the HTTP layer.

Implementations raise ``core.errors.ServiceError`` for expected failures.
Paged queries take an already-normalised ``page``/``page_size`` and return
``(items, total)``.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from core.domain.content import (
    ArticleDetail,
    ArticleSummary,
    CategoryNode,
    ColumnDetail,
    CommentNode,
    CommentStats,
    TopicDetail,
    UserCommentStats,
)


class ArticleService(ABC):
    """Articles, drafts, categories and topics."""

    # Articles

    @abstractmethod
    async def list_articles(
        self,
        *,
        sort_by: str,
        category_id: Optional[int],
        column_id: Optional[int],
        keyword: Optional[str],
        page: int,
        page_size: int,
    ) -> tuple[list[ArticleSummary], int]:
        """Published public articles."""
        ...

    @abstractmethod
    async def get_article(self, article_id: int, viewer_id: Optional[str]) -> ArticleDetail:
        """Article detail. Counts a view."""
        ...

    @abstractmethod
    async def get_article_history(self, article_id: int) -> list[Any]:
        ...

    @abstractmethod
    async def create_article(self, actor_id: str, data: dict[str, Any]) -> Any:
        ...

    @abstractmethod
    async def update_article(self, actor_id: str, article_id: int, data: dict[str, Any]) -> Any:
        ...

    @abstractmethod
    async def delete_article(self, actor_id: str, article_id: int) -> None:
        ...

    # Drafts

    @abstractmethod
    async def save_draft(self, actor_id: str, data: dict[str, Any]) -> Any:
        ...

    @abstractmethod
    async def list_drafts(self, actor_id: str, page: int, page_size: int) -> tuple[list[Any], int]:
        ...

    @abstractmethod
    async def get_draft(self, actor_id: str, draft_id: int) -> Any:
        ...

    @abstractmethod
    async def update_draft(self, actor_id: str, draft_id: int, data: dict[str, Any]) -> Any:
        ...

    @abstractmethod
    async def delete_draft(self, actor_id: str, draft_id: int) -> None:
        ...

    @abstractmethod
    async def publish_draft(self, actor_id: str, draft_id: int) -> Any:
        """Turn a draft into a published article."""
        ...

    # Categories

    @abstractmethod
    async def get_category_tree(self) -> list[CategoryNode]:
        ...

    @abstractmethod
    async def list_category_articles(
        self, category_id: int, page: int, page_size: int
    ) -> tuple[list[ArticleSummary], int]:
        ...

    @abstractmethod
    async def create_category(self, data: dict[str, Any]) -> Any:
        ...

    # Topics

    @abstractmethod
    async def get_hot_topics(self, limit: int) -> list[Any]:
        ...

    @abstractmethod
    async def get_topic(self, topic_id: int, viewer_id: Optional[str]) -> TopicDetail:
        ...

    @abstractmethod
    async def list_topic_articles(
        self, topic_id: int, page: int, page_size: int
    ) -> tuple[list[ArticleSummary], int]:
        ...

    @abstractmethod
    async def create_topic(self, actor_id: str, data: dict[str, Any]) -> Any:
        """Create a topic, or return the existing one with the same name."""
        ...

    @abstractmethod
    async def follow_topic(self, actor_id: str, topic_id: int) -> None:
        ...

    @abstractmethod
    async def unfollow_topic(self, actor_id: str, topic_id: int) -> None:
        ...


class CommentService(ABC):
    """Threaded comments, interactions, reports and the word list."""

    # Queries

    @abstractmethod
    async def list_root_comments(
        self, target_type: int, target_id: int, sort_by: str, page: int, page_size: int
    ) -> tuple[list[Any], int]:
        ...

    @abstractmethod
    async def get_hot_comments(self, target_type: int, target_id: int, limit: int) -> list[Any]:
        ...

    @abstractmethod
    async def get_comment_stats(self, target_type: int, target_id: int) -> CommentStats:
        ...

    @abstractmethod
    async def get_user_comment_stats(self, user_id: str) -> UserCommentStats:
        ...

    @abstractmethod
    async def get_comment(self, comment_id: int) -> Any:
        ...

    @abstractmethod
    async def list_replies(
        self, comment_id: int, page: int, page_size: int
    ) -> tuple[list[Any], int]:
        ...

    @abstractmethod
    async def get_comment_tree(self, comment_id: int) -> CommentNode:
        ...

    # Writes

    @abstractmethod
    async def create_root_comment(
        self,
        actor_id: str,
        data: dict[str, Any],
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Any:
        ...

    @abstractmethod
    async def create_reply(
        self,
        actor_id: str,
        data: dict[str, Any],
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Any:
        ...

    @abstractmethod
    async def delete_comment(self, actor_id: str, comment_id: int, is_admin: bool = False) -> None:
        ...

    @abstractmethod
    async def like_comment(self, actor_id: str, comment_id: int) -> None:
        ...

    @abstractmethod
    async def unlike_comment(self, actor_id: str, comment_id: int) -> None:
        ...

    @abstractmethod
    async def dislike_comment(self, actor_id: str, comment_id: int) -> None:
        ...

    @abstractmethod
    async def undislike_comment(self, actor_id: str, comment_id: int) -> None:
        ...

    @abstractmethod
    async def report_comment(
        self, actor_id: str, comment_id: int, reason_type: int, reason_desc: Optional[str]
    ) -> Any:
        ...

    @abstractmethod
    async def add_author_reply(self, actor_id: str, comment_id: int, content: str) -> Any:
        ...

    @abstractmethod
    async def set_pinned(self, actor_id: str, comment_id: int, pinned: bool) -> None:
        ...

    @abstractmethod
    async def set_featured(self, actor_id: str, comment_id: int, featured: bool) -> None:
        ...

    # Moderation

    @abstractmethod
    async def batch_delete(self, actor_id: str, comment_ids: list[int]) -> int:
        ...

    @abstractmethod
    async def batch_fold(self, actor_id: str, comment_ids: list[int]) -> int:
        ...

    @abstractmethod
    async def list_pending_reports(self, page: int, page_size: int) -> tuple[list[Any], int]:
        ...

    @abstractmethod
    async def handle_report(
        self, actor_id: str, report_id: int, result: str, approved: bool
    ) -> Any:
        ...

    @abstractmethod
    async def list_sensitive_words(self) -> list[Any]:
        ...

    @abstractmethod
    async def add_sensitive_word(self, data: dict[str, Any]) -> Any:
        ...


class ColumnService(ABC):
    """Columns, their article membership and subscriptions."""

    @abstractmethod
    async def list_columns(self, page: int, page_size: int) -> tuple[list[Any], int]:
        ...

    @abstractmethod
    async def get_hot_columns(self, limit: int) -> list[Any]:
        ...

    @abstractmethod
    async def list_subscribed_columns(
        self, actor_id: str, page: int, page_size: int
    ) -> tuple[list[Any], int]:
        ...

    @abstractmethod
    async def list_user_columns(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[Any], int]:
        ...

    @abstractmethod
    async def get_column(self, column_id: int, viewer_id: Optional[str]) -> ColumnDetail:
        ...

    @abstractmethod
    async def list_column_articles(
        self, column_id: int, page: int, page_size: int
    ) -> tuple[list[ArticleSummary], int]:
        """Articles in the column's configured order."""
        ...

    @abstractmethod
    async def create_column(self, actor_id: str, role: str, data: dict[str, Any]) -> Any:
        ...

    @abstractmethod
    async def update_column(self, actor_id: str, column_id: int, data: dict[str, Any]) -> Any:
        ...

    @abstractmethod
    async def delete_column(self, actor_id: str, column_id: int) -> None:
        ...

    @abstractmethod
    async def subscribe(self, actor_id: str, column_id: int) -> None:
        ...

    @abstractmethod
    async def unsubscribe(self, actor_id: str, column_id: int) -> None:
        ...

    @abstractmethod
    async def add_article(
        self, actor_id: str, column_id: int, article_id: int, sort_order: int = 0
    ) -> None:
        ...

    @abstractmethod
    async def remove_article(self, actor_id: str, column_id: int, article_id: int) -> None:
        ...

    @abstractmethod
    async def update_article_position(
        self, actor_id: str, column_id: int, article_id: int, sort_order: int
    ) -> None:
        ...
