"""
Column API schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .common import UserBrief


class ColumnCreateRequest(BaseModel):
    """Request to create a column."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    cover_image: str | None = Field(None, max_length=500)
    sort_type: int = Field(
        default=1, ge=1, le=3, description="1 custom, 2 oldest first, 3 newest first"
    )


class ColumnUpdateRequest(BaseModel):
    """Request to update a column. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    cover_image: str | None = Field(None, max_length=500)
    sort_type: int | None = Field(None, ge=1, le=3)
    is_finished: bool | None = None


class ColumnArticleAddRequest(BaseModel):
    article_id: int = Field(..., ge=1)
    sort_order: int = 0


class ColumnArticlePositionRequest(BaseModel):
    sort_order: int = Field(...)


class ColumnResponse(BaseModel):
    id: int
    user_id: str
    name: str
    description: str | None = None
    cover_image: str | None = None
    article_count: int
    subscriber_count: int
    is_finished: bool
    sort_type: int
    status: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ColumnListResult(BaseModel):
    columns: list[ColumnResponse]
    total: int
    page: int
    page_size: int


class ColumnDetailResult(BaseModel):
    """Column with its owner and whether the viewer subscribes to it."""

    column: ColumnResponse
    author: UserBrief | None = None
    article_count: int
    is_subscribed: bool = False

    model_config = ConfigDict(from_attributes=True)
