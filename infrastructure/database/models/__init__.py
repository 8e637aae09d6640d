"""
SQLAlchemy database models.
"""

from .article import (
    Article,
    ArticleContent,
    ArticleDraft,
    ArticleHistory,
    ArticleTopic,
    Category,
    Topic,
    TopicFollow,
)
from .base import Base, TimestampMixin
from .column import ArticleColumn, ColumnArticle, ColumnSubscription
from .comment import (
    Comment,
    CommentAuthorReply,
    CommentFloorBuilding,
    CommentInteraction,
    CommentReport,
    SensitiveWord,
)
from .user import User, UserRole, UserStatus

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "UserRole",
    "UserStatus",
    "Article",
    "ArticleContent",
    "ArticleDraft",
    "ArticleHistory",
    "ArticleTopic",
    "Category",
    "Topic",
    "TopicFollow",
    "ArticleColumn",
    "ColumnArticle",
    "ColumnSubscription",
    "Comment",
    "CommentAuthorReply",
    "CommentFloorBuilding",
    "CommentInteraction",
    "CommentReport",
    "SensitiveWord",
]
