"""Content domain vocabulary and composite read models."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional


class ArticleStatus(IntEnum):
    """Article lifecycle status."""
    PUBLISHED = 1
    AUDITING = 2
    AUDIT_FAILED = 3
    OFFLINE = 4
    DELETED = 5


class ArticleVisibility(IntEnum):
    PUBLIC = 1
    FOLLOWERS = 2
    FRIENDS = 3
    PRIVATE = 4
    PAID = 5


class ArticleContentType(IntEnum):
    TEXT = 1
    VIDEO = 2
    AUDIO = 3
    QA = 4


class HistoryChangeType(IntEnum):
    """Why an article revision was recorded."""
    CREATE = 1
    EDIT = 2
    PUBLISH = 3
    OFFLINE = 4


class ColumnSortType(IntEnum):
    """How a column orders its articles."""
    CUSTOM = 1     # by sort_order
    TIME_ASC = 2   # oldest publish first
    TIME_DESC = 3  # newest publish first


class ColumnStatus(IntEnum):
    NORMAL = 1
    HIDDEN = 2


class CommentTargetType(IntEnum):
    """What a comment thread hangs off."""
    ARTICLE = 1
    VIDEO = 2
    QA = 3
    DYNAMIC = 4


class CommentStatus(IntEnum):
    NORMAL = 1
    AUDITING = 2
    DELETED = 3
    FOLDED = 4
    BLOCKED = 5


class AuditStatus(IntEnum):
    PENDING = 0
    APPROVED = 1
    REJECTED = 2


class RiskLevel(IntEnum):
    NORMAL = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class InteractionType(IntEnum):
    LIKE = 1
    DISLIKE = 2


class ReportReason(IntEnum):
    SPAM = 1
    PORN = 2
    POLITICAL = 3
    ABUSE = 4
    FAKE_NEWS = 5


class ReportStatus(IntEnum):
    PENDING = 0
    UPHELD = 1
    REJECTED = 2


class SensitiveLevel(IntEnum):
    NORMAL = 1
    SERIOUS = 2
    SEVERE = 3


class SensitiveAction(IntEnum):
    """What to do with content containing a sensitive word."""
    REPLACE = 1
    BLOCK = 2
    AUDIT = 3


# Composite read models returned by the services. Attribute names match the
# response schemas so they can be validated with from_attributes.


@dataclass
class ArticleDetail:
    """An article together with its body, author and category."""

    article: Any
    content: Optional[Any] = None
    author: Optional[Any] = None
    category: Optional[Any] = None
    is_author: bool = False


@dataclass
class ArticleSummary:
    """List entry: an article and its author."""

    article: Any
    author: Optional[Any] = None


@dataclass
class CategoryNode:
    """A category with its child categories."""

    category: Any
    children: list["CategoryNode"] = field(default_factory=list)


@dataclass
class TopicDetail:
    topic: Any
    is_followed: bool = False


@dataclass
class ColumnDetail:
    """A column with its owner and the viewer's subscription state."""

    column: Any
    author: Optional[Any] = None
    article_count: int = 0
    is_subscribed: bool = False


@dataclass
class CommentNode:
    """A comment and the replies attached beneath it."""

    comment: Any
    replies: list["CommentNode"] = field(default_factory=list)


@dataclass
class CommentStats:
    """Aggregate counts for one comment thread target."""

    target_type: int
    target_id: int
    total_count: int = 0
    root_count: int = 0
    today_count: int = 0
    last_comment_time: Optional[datetime] = None


@dataclass
class UserCommentStats:
    total_comments: int = 0
    total_likes: int = 0
    total_replies: int = 0
    avg_like_count: float = 0.0
    hot_comment_count: int = 0
    pinned_count: int = 0
    featured_count: int = 0
