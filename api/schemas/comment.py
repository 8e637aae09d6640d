"""
Comment API schemas for threads, interactions, reports and the word list.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.domain.content import CommentNode

# ============================================================================
# Comment Schemas
# ============================================================================


class CommentCreateRequest(BaseModel):
    """Request to post a root comment on a target."""

    target_type: int = Field(..., ge=1, le=4, description="1 article, 2 video, 3 QA, 4 dynamic")
    target_id: int = Field(..., ge=1)
    content: str = Field(..., min_length=1, max_length=5000)
    content_type: int = Field(default=1, ge=1, le=3)
    images: list[str] = Field(default_factory=list, max_length=9)
    at_user_ids: list[str] = Field(default_factory=list, max_length=20)


class ReplyCreateRequest(BaseModel):
    """Request to reply inside an existing thread."""

    parent_id: int = Field(..., ge=1)
    reply_to_comment_id: int = Field(default=0, ge=0)
    reply_to_user_id: str | None = Field(None, max_length=64)
    content: str = Field(..., min_length=1, max_length=5000)
    content_type: int = Field(default=1, ge=1, le=3)
    images: list[str] = Field(default_factory=list, max_length=9)
    at_user_ids: list[str] = Field(default_factory=list, max_length=20)


class CommentResponse(BaseModel):
    """Comment as shown to readers."""

    id: int
    target_type: int
    target_id: int
    user_id: str
    username: str | None = None
    user_avatar: str | None = None
    parent_id: int
    root_id: int
    reply_to_user_id: str | None = None
    reply_to_comment_id: int
    floor_number: int
    sub_floor_number: int
    reply_chain: list[int] = Field(default_factory=list)
    depth: int
    content: str
    content_type: int
    images: list[str] = Field(default_factory=list)
    at_user_ids: list[str] = Field(default_factory=list)
    status: int
    is_pinned: bool
    is_author: bool
    is_hot: bool
    is_featured: bool
    like_count: int
    dislike_count: int
    reply_count: int
    total_reply_count: int
    hot_score: float
    audit_status: int
    risk_level: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentListResult(BaseModel):
    comments: list[CommentResponse]
    total: int
    page: int
    page_size: int


class CommentNodeResponse(CommentResponse):
    """Comment with its nested replies."""

    replies: list["CommentNodeResponse"] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: CommentNode) -> "CommentNodeResponse":
        base = CommentResponse.model_validate(node.comment)
        return cls(
            **base.model_dump(),
            replies=[cls.from_node(child) for child in node.replies],
        )


class CommentStatsResult(BaseModel):
    target_type: int
    target_id: int
    total_count: int
    root_count: int
    today_count: int
    last_comment_time: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UserCommentStatsResult(BaseModel):
    total_comments: int
    total_likes: int
    total_replies: int
    avg_like_count: float
    hot_comment_count: int
    pinned_count: int
    featured_count: int

    model_config = ConfigDict(from_attributes=True)


class AuthorReplyRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=500)


class AuthorReplyResponse(BaseModel):
    id: int
    comment_id: int
    author_user_id: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BatchCommentRequest(BaseModel):
    comment_ids: list[int] = Field(..., min_length=1, max_length=100)


# ============================================================================
# Report Schemas
# ============================================================================


class ReportCreateRequest(BaseModel):
    reason_type: int = Field(
        ..., ge=1, le=5, description="1 spam, 2 porn, 3 political, 4 abuse, 5 fake news"
    )
    reason_desc: str | None = Field(None, max_length=500)


class ReportHandleRequest(BaseModel):
    result: str = Field(..., min_length=1, max_length=500)
    approved: bool = False


class ReportResponse(BaseModel):
    id: int
    comment_id: int
    reporter_user_id: str
    reason_type: int
    reason_desc: str | None = None
    status: int
    handle_user_id: str | None = None
    handle_result: str | None = None
    handle_time: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportListResult(BaseModel):
    reports: list[ReportResponse]
    total: int
    page: int
    page_size: int


# ============================================================================
# Sensitive Word Schemas
# ============================================================================


class SensitiveWordCreateRequest(BaseModel):
    word: str = Field(..., min_length=1, max_length=100)
    level: int = Field(default=1, ge=1, le=3)
    action: int = Field(default=1, ge=1, le=3)
    replacement: str | None = Field(None, max_length=100)


class SensitiveWordResponse(BaseModel):
    id: int
    word: str
    level: int
    action: int
    replacement: str | None = None
    is_enabled: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
