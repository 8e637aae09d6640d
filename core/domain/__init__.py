# Domain vocabulary
# Pure business objects with no external dependencies
from .content import (
    ArticleDetail,
    ArticleStatus,
    ArticleSummary,
    CategoryNode,
    ColumnDetail,
    CommentNode,
    CommentStats,
    CommentStatus,
    TopicDetail,
    UserCommentStats,
)

__all__ = [
    "ArticleDetail",
    "ArticleStatus",
    "ArticleSummary",
    "CategoryNode",
    "ColumnDetail",
    "CommentNode",
    "CommentStats",
    "CommentStatus",
    "TopicDetail",
    "UserCommentStats",
]
