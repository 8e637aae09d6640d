"""
Comment database models: threaded comments, interactions, reports and word lists.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from core.domain.content import (
    AuditStatus,
    CommentStatus,
    ReportStatus,
    RiskLevel,
    SensitiveAction,
    SensitiveLevel,
)

from .base import Base, BigIntId, TimestampMixin, utcnow


class Comment(Base, TimestampMixin):
    """A root comment (parent_id 0) or a reply within a thread."""

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_target", "target_type", "target_id", "parent_id"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)

    # What the thread is attached to
    target_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    target_id: Mapped[int] = mapped_column(BigIntId, nullable=False)

    # Author snapshot
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    username: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    user_avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Threading
    parent_id: Mapped[int] = mapped_column(BigIntId, default=0, nullable=False, index=True)
    root_id: Mapped[int] = mapped_column(BigIntId, default=0, nullable=False, index=True)
    reply_to_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    reply_to_comment_id: Mapped[int] = mapped_column(BigIntId, default=0, nullable=False)
    floor_number: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    sub_floor_number: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reply_chain: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    depth: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Body
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[int] = mapped_column(SmallInteger, default=1, nullable=False)
    images: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    at_user_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # State
    status: Mapped[int] = mapped_column(
        SmallInteger, default=CommentStatus.NORMAL.value, nullable=False, index=True
    )
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_author: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_hot: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Counters
    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    dislike_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reply_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_reply_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    hot_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # Client
    ip: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Audit
    audit_status: Mapped[int] = mapped_column(
        SmallInteger, default=AuditStatus.PENDING.value, nullable=False
    )
    risk_level: Mapped[int] = mapped_column(
        SmallInteger, default=RiskLevel.NORMAL.value, nullable=False
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, target={self.target_type}:{self.target_id})>"


class CommentInteraction(Base):
    """A like or dislike left on a comment."""

    __tablename__ = "comment_interactions"
    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", "action_type", name="uq_comment_interaction"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    comment_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    action_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class CommentReport(Base, TimestampMixin):
    """A user report against a comment, reviewed by an administrator."""

    __tablename__ = "comment_reports"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    comment_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reporter_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reason_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    reason_desc: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    status: Mapped[int] = mapped_column(
        SmallInteger, default=ReportStatus.PENDING.value, nullable=False, index=True
    )
    handle_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    handle_result: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    handle_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class CommentFloorBuilding(Base):
    """Run of comments one user has posted on one target."""

    __tablename__ = "comment_floor_buildings"
    __table_args__ = (
        UniqueConstraint("target_type", "target_id", "user_id", name="uq_comment_floor_building"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    target_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    target_id: Mapped[int] = mapped_column(BigIntId, nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    comment_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    floor_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    first_comment_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_comment_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class CommentAuthorReply(Base):
    """A follow-up note the target's author attaches to a comment."""

    __tablename__ = "comment_author_replies"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    comment_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(String(500), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class SensitiveWord(Base, TimestampMixin):
    """Entry of the moderation word list."""

    __tablename__ = "sensitive_words"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    word: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    level: Mapped[int] = mapped_column(
        SmallInteger, default=SensitiveLevel.NORMAL.value, nullable=False
    )
    action: Mapped[int] = mapped_column(
        SmallInteger, default=SensitiveAction.REPLACE.value, nullable=False
    )
    replacement: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
