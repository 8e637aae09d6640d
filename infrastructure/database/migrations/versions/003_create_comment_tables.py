"""Create comment, interaction, report, floor-building, author reply and word tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: str | None = "002"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "comments",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("target_type", sa.SmallInteger(), nullable=False),
        sa.Column("target_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=True),
        sa.Column("user_avatar", sa.String(length=500), nullable=True),
        sa.Column("parent_id", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("root_id", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("reply_to_user_id", sa.String(length=64), nullable=True),
        sa.Column("reply_to_comment_id", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("floor_number", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sub_floor_number", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reply_chain", sa.JSON(), nullable=False),
        sa.Column("depth", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("content_type", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("at_user_ids", sa.JSON(), nullable=False),
        sa.Column("status", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column("is_pinned", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_author", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_hot", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dislike_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reply_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_reply_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hot_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("ip", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("audit_status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("risk_level", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_target", "comments", ["target_type", "target_id", "parent_id"])
    op.create_index("ix_comments_user_id", "comments", ["user_id"])
    op.create_index("ix_comments_parent_id", "comments", ["parent_id"])
    op.create_index("ix_comments_root_id", "comments", ["root_id"])
    op.create_index("ix_comments_status", "comments", ["status"])
    op.create_index("ix_comments_created_at", "comments", ["created_at"])

    op.create_table(
        "comment_interactions",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("comment_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("action_type", sa.SmallInteger(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["comment_id"], ["comments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "comment_id", "user_id", "action_type", name="uq_comment_interaction"
        ),
    )
    op.create_index("ix_comment_interactions_comment_id", "comment_interactions", ["comment_id"])
    op.create_index("ix_comment_interactions_user_id", "comment_interactions", ["user_id"])

    op.create_table(
        "comment_reports",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("comment_id", sa.BigInteger(), nullable=False),
        sa.Column("reporter_user_id", sa.String(length=64), nullable=False),
        sa.Column("reason_type", sa.SmallInteger(), nullable=False),
        sa.Column("reason_desc", sa.String(length=500), nullable=True),
        sa.Column("status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("handle_user_id", sa.String(length=64), nullable=True),
        sa.Column("handle_result", sa.String(length=500), nullable=True),
        sa.Column("handle_time", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["comment_id"], ["comments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comment_reports_comment_id", "comment_reports", ["comment_id"])
    op.create_index("ix_comment_reports_status", "comment_reports", ["status"])
    op.create_index("ix_comment_reports_created_at", "comment_reports", ["created_at"])

    op.create_table(
        "comment_floor_buildings",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("target_type", sa.SmallInteger(), nullable=False),
        sa.Column("target_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("comment_ids", sa.JSON(), nullable=False),
        sa.Column("floor_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("first_comment_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_comment_time", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "target_type", "target_id", "user_id", name="uq_comment_floor_building"
        ),
    )

    op.create_table(
        "comment_author_replies",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("comment_id", sa.BigInteger(), nullable=False),
        sa.Column("author_user_id", sa.String(length=64), nullable=False),
        sa.Column("content", sa.String(length=500), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["comment_id"], ["comments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_comment_author_replies_comment_id", "comment_author_replies", ["comment_id"]
    )

    op.create_table(
        "sensitive_words",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("word", sa.String(length=100), nullable=False),
        sa.Column("level", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column("action", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column("replacement", sa.String(length=100), nullable=True),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default="true"),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("word"),
    )
    op.create_index("ix_sensitive_words_created_at", "sensitive_words", ["created_at"])


def downgrade() -> None:
    op.drop_table("sensitive_words")
    op.drop_table("comment_author_replies")
    op.drop_table("comment_floor_buildings")
    op.drop_table("comment_reports")
    op.drop_table("comment_interactions")
    op.drop_table("comments")
