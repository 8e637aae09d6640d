"""
Column API routes.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Path

from api.dependencies import (
    Columns,
    CurrentActor,
    OptionalActor,
    Page10,
    Page20,
    parse_int,
)
from api.response import ok
from api.schemas.article import ArticleListItem, ArticleListResult
from api.schemas.column import (
    ColumnArticleAddRequest,
    ColumnArticlePositionRequest,
    ColumnCreateRequest,
    ColumnDetailResult,
    ColumnListResult,
    ColumnResponse,
    ColumnUpdateRequest,
)
from api.schemas.common import Envelope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["columns"])

ColumnId = Annotated[int, Path(ge=1)]
ArticleId = Annotated[int, Path(ge=1)]

HOT_COLUMNS_DEFAULT = 10


def _column_list(columns: list, total: int, page: int, page_size: int) -> ColumnListResult:
    return ColumnListResult(
        columns=[ColumnResponse.model_validate(c) for c in columns],
        total=total,
        page=page,
        page_size=page_size,
    )


# ============================================================================
# Listings
# ============================================================================


@router.get("/columns", response_model=Envelope[ColumnListResult])
async def list_columns(service: Columns, paging: Page10):
    """Visible columns, newest first."""
    columns, total = await service.list_columns(paging.page, paging.page_size)
    return ok(_column_list(columns, total, paging.page, paging.page_size))


@router.get("/columns/hot", response_model=Envelope[list[ColumnResponse]])
async def get_hot_columns(service: Columns, limit: Optional[str] = None):
    """Most subscribed columns. Out-of-range limits fall back to 10."""
    columns = await service.get_hot_columns(parse_int(limit, HOT_COLUMNS_DEFAULT))
    return ok([ColumnResponse.model_validate(c) for c in columns])


@router.get("/columns/subscribed", response_model=Envelope[ColumnListResult])
async def list_subscribed_columns(actor: CurrentActor, service: Columns, paging: Page10):
    columns, total = await service.list_subscribed_columns(
        actor.actor_id, paging.page, paging.page_size
    )
    return ok(_column_list(columns, total, paging.page, paging.page_size))


@router.get("/user/{user_id}/columns", response_model=Envelope[ColumnListResult])
async def list_user_columns(
    user_id: Annotated[str, Path(min_length=1, max_length=64)],
    service: Columns,
    paging: Page10,
):
    columns, total = await service.list_user_columns(user_id, paging.page, paging.page_size)
    return ok(_column_list(columns, total, paging.page, paging.page_size))


# ============================================================================
# Single column
# ============================================================================


@router.get("/columns/{column_id}", response_model=Envelope[ColumnDetailResult])
async def get_column(column_id: ColumnId, service: Columns, viewer: OptionalActor):
    detail = await service.get_column(column_id, viewer.actor_id if viewer else None)
    return ok(ColumnDetailResult.model_validate(detail))


@router.get("/columns/{column_id}/articles", response_model=Envelope[ArticleListResult])
async def list_column_articles(column_id: ColumnId, service: Columns, paging: Page20):
    """Articles in the column, in the order its sort_type selects."""
    articles, total = await service.list_column_articles(
        column_id, paging.page, paging.page_size
    )
    return ok(
        ArticleListResult(
            articles=[ArticleListItem.from_summary(summary) for summary in articles],
            total=total,
            page=paging.page,
            page_size=paging.page_size,
        )
    )


@router.post("/columns", response_model=Envelope[ColumnResponse])
async def create_column(body: ColumnCreateRequest, actor: CurrentActor, service: Columns):
    column = await service.create_column(actor.actor_id, actor.role, body.model_dump())
    return ok(ColumnResponse.model_validate(column))


@router.put("/columns/{column_id}", response_model=Envelope[ColumnResponse])
async def update_column(
    column_id: ColumnId,
    body: ColumnUpdateRequest,
    actor: CurrentActor,
    service: Columns,
):
    column = await service.update_column(
        actor.actor_id, column_id, body.model_dump(exclude_unset=True)
    )
    return ok(ColumnResponse.model_validate(column))


@router.delete("/columns/{column_id}", response_model=Envelope[None])
async def delete_column(column_id: ColumnId, actor: CurrentActor, service: Columns):
    """Hide a column. Its articles are left untouched."""
    await service.delete_column(actor.actor_id, column_id)
    return ok()


# ============================================================================
# Subscriptions
# ============================================================================


@router.post("/columns/{column_id}/subscribe", response_model=Envelope[None])
async def subscribe_column(column_id: ColumnId, actor: CurrentActor, service: Columns):
    await service.subscribe(actor.actor_id, column_id)
    return ok()


@router.delete("/columns/{column_id}/subscribe", response_model=Envelope[None])
async def unsubscribe_column(column_id: ColumnId, actor: CurrentActor, service: Columns):
    await service.unsubscribe(actor.actor_id, column_id)
    return ok()


# ============================================================================
# Membership
# ============================================================================


@router.post("/columns/{column_id}/articles", response_model=Envelope[None])
async def add_column_article(
    column_id: ColumnId,
    body: ColumnArticleAddRequest,
    actor: CurrentActor,
    service: Columns,
):
    await service.add_article(actor.actor_id, column_id, body.article_id, body.sort_order)
    return ok()


@router.delete("/columns/{column_id}/articles/{article_id}", response_model=Envelope[None])
async def remove_column_article(
    column_id: ColumnId,
    article_id: ArticleId,
    actor: CurrentActor,
    service: Columns,
):
    await service.remove_article(actor.actor_id, column_id, article_id)
    return ok()


@router.put(
    "/columns/{column_id}/articles/{article_id}/position",
    response_model=Envelope[None],
)
async def update_column_article_position(
    column_id: ColumnId,
    article_id: ArticleId,
    body: ColumnArticlePositionRequest,
    actor: CurrentActor,
    service: Columns,
):
    await service.update_article_position(
        actor.actor_id, column_id, article_id, body.sort_order
    )
    return ok()
