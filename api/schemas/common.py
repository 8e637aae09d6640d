"""
Shared response schemas: the response envelope and brief user profiles.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    """Uniform wrapper around every API reply. HTTP status is always 200."""

    code: int = Field(default=200, description="Outcome code; 200 on success")
    message: str = "success"
    data: DataT | None = None


class UserBrief(BaseModel):
    """Public profile snippet shown next to content."""

    id: str
    username: str | None = None
    avatar: str | None = None
    intro: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BatchResult(BaseModel):
    """Outcome of a batch moderation action."""

    affected: int
