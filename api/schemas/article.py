"""
Article API schemas for articles, drafts, categories and topics.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.domain.content import ArticleSummary, CategoryNode

from .common import UserBrief

# ============================================================================
# Article Schemas
# ============================================================================


class ArticleCreateRequest(BaseModel):
    """Request to publish a new article."""

    title: str = Field(..., min_length=1, max_length=200)
    summary: str | None = Field(None, max_length=500)
    content: str = Field(..., min_length=10, description="Markdown body")
    cover_image: str | None = Field(None, max_length=500)
    content_type: int = Field(default=1, ge=1, le=4)
    category_id: int = Field(default=0, ge=0)
    column_id: int = Field(default=0, ge=0)
    tags: list[str] = Field(default_factory=list, max_length=20)
    topics: list[str] = Field(default_factory=list, max_length=10)
    visibility: int = Field(default=1, ge=1, le=5)
    allow_comment: bool = True
    is_paid: bool = False
    price: float = Field(default=0, ge=0)
    keywords: str | None = Field(None, max_length=500)
    description: str | None = Field(None, max_length=500)


class ArticleUpdateRequest(BaseModel):
    """Request to edit an article. Omitted fields are left unchanged.

    An explicit null clears an optional field and is ignored for a required one.
    """

    title: str | None = Field(None, min_length=1, max_length=200)
    summary: str | None = Field(None, max_length=500)
    content: str | None = Field(None, min_length=10)
    cover_image: str | None = Field(None, max_length=500)
    category_id: int | None = Field(None, ge=0)
    column_id: int | None = Field(None, ge=0)
    content_type: int | None = Field(None, ge=1, le=4)
    tags: list[str] | None = Field(None, max_length=20)
    topics: list[str] | None = Field(None, max_length=10)
    visibility: int | None = Field(None, ge=1, le=5)
    allow_comment: bool | None = None
    is_paid: bool | None = None
    price: float | None = Field(None, ge=0)
    keywords: str | None = Field(None, max_length=500)
    description: str | None = Field(None, max_length=500)
    change_reason: str | None = Field(None, max_length=200)


class ArticleResponse(BaseModel):
    """Article metadata."""

    id: int
    user_id: str
    title: str
    summary: str | None = None
    cover_image: str | None = None
    content_type: int
    category_id: int
    column_id: int
    tags: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    status: int
    visibility: int
    allow_comment: bool
    view_count: int
    like_count: int
    comment_count: int
    share_count: int
    favorite_count: int
    hot_score: float
    is_featured: bool
    is_hot: bool
    keywords: str | None = None
    description: str | None = None
    is_paid: bool
    price: float
    publish_time: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ArticleListItem(ArticleResponse):
    """Article in a list, with its author's display name and avatar."""

    author_name: str | None = None
    author_avatar: str | None = None

    @classmethod
    def from_summary(cls, summary: ArticleSummary) -> "ArticleListItem":
        item = cls.model_validate(summary.article)
        if summary.author is not None:
            item.author_name = summary.author.username
            item.author_avatar = summary.author.avatar
        return item


class ArticleListResult(BaseModel):
    articles: list[ArticleListItem]
    total: int
    page: int
    page_size: int


class ArticleContentResponse(BaseModel):
    content: str
    content_html: str | None = None
    word_count: int
    read_time: int

    model_config = ConfigDict(from_attributes=True)


class ArticleHistoryResponse(BaseModel):
    """One recorded revision."""

    id: int
    article_id: int
    version: int
    title: str
    summary: str | None = None
    content: str | None = None
    change_type: int
    change_reason: str | None = None
    operator_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    parent_id: int = Field(default=0, ge=0)
    icon: str | None = Field(None, max_length=200)
    sort_order: int = 0


class CategoryResponse(BaseModel):
    id: int
    name: str
    parent_id: int
    icon: str | None = None
    sort_order: int
    article_count: int
    is_show: bool

    model_config = ConfigDict(from_attributes=True)


class CategoryNodeResponse(CategoryResponse):
    """Category with its nested children."""

    children: list["CategoryNodeResponse"] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: CategoryNode) -> "CategoryNodeResponse":
        base = CategoryResponse.model_validate(node.category)
        return cls(
            **base.model_dump(),
            children=[cls.from_node(child) for child in node.children],
        )


class ArticleDetailResult(BaseModel):
    """Full article view."""

    article: ArticleResponse
    content: ArticleContentResponse | None = None
    author: UserBrief | None = None
    category: CategoryResponse | None = None
    is_author: bool = False

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Draft Schemas
# ============================================================================


class DraftSaveRequest(BaseModel):
    """Draft body. Every field is optional so partial work can be saved."""

    article_id: int = Field(default=0, ge=0)
    title: str | None = Field(None, max_length=200)
    summary: str | None = Field(None, max_length=500)
    content: str | None = None
    cover_image: str | None = Field(None, max_length=500)
    category_id: int = Field(default=0, ge=0)
    column_id: int = Field(default=0, ge=0)
    tags: list[str] = Field(default_factory=list, max_length=20)
    topics: list[str] = Field(default_factory=list, max_length=10)


class DraftUpdateRequest(BaseModel):
    title: str | None = Field(None, max_length=200)
    summary: str | None = Field(None, max_length=500)
    content: str | None = None
    cover_image: str | None = Field(None, max_length=500)
    category_id: int | None = Field(None, ge=0)
    column_id: int | None = Field(None, ge=0)
    tags: list[str] | None = Field(None, max_length=20)
    topics: list[str] | None = Field(None, max_length=10)


class DraftResponse(BaseModel):
    id: int
    user_id: str
    article_id: int
    title: str | None = None
    summary: str | None = None
    content: str | None = None
    cover_image: str | None = None
    category_id: int
    column_id: int
    tags: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    auto_save_count: int
    last_edit_time: datetime | None = None
    is_published: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DraftListResult(BaseModel):
    drafts: list[DraftResponse]
    total: int
    page: int
    page_size: int


# ============================================================================
# Topic Schemas
# ============================================================================


class TopicCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    cover_image: str | None = Field(None, max_length=500)


class TopicResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    cover_image: str | None = None
    article_count: int
    follow_count: int
    view_count: int
    hot_score: float
    is_hot: bool
    creator_id: str | None = None
    status: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TopicDetailResult(BaseModel):
    topic: TopicResponse
    is_followed: bool = False

    model_config = ConfigDict(from_attributes=True)
