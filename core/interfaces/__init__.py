# Interfaces (Abstract Contracts)
# Service implementations in services/ satisfy these
from .services import ArticleService, ColumnService, CommentService

__all__ = [
    "ArticleService",
    "ColumnService",
    "CommentService",
]
