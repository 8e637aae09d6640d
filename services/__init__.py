"""
Service layer for business logic.
"""

from services.articles import SqlArticleService
from services.columns import SqlColumnService
from services.comments import SqlCommentService

__all__ = [
    "SqlArticleService",
    "SqlColumnService",
    "SqlCommentService",
]
