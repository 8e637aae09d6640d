"""
Category API routes.
"""

from typing import Annotated

from fastapi import APIRouter, Path

from api.dependencies import AdminActor, Articles, Page20
from api.response import ok
from api.schemas.article import (
    ArticleListItem,
    ArticleListResult,
    CategoryCreateRequest,
    CategoryNodeResponse,
    CategoryResponse,
)
from api.schemas.common import Envelope

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=Envelope[list[CategoryNodeResponse]])
async def get_category_tree(service: Articles):
    """Visible categories as a tree, ordered by sort_order."""
    roots = await service.get_category_tree()
    return ok([CategoryNodeResponse.from_node(node) for node in roots])


@router.get("/{category_id}/articles", response_model=Envelope[ArticleListResult])
async def list_category_articles(
    category_id: Annotated[int, Path(ge=1)],
    service: Articles,
    paging: Page20,
):
    articles, total = await service.list_category_articles(
        category_id, paging.page, paging.page_size
    )
    return ok(
        ArticleListResult(
            articles=[ArticleListItem.from_summary(summary) for summary in articles],
            total=total,
            page=paging.page,
            page_size=paging.page_size,
        )
    )


@router.post("", response_model=Envelope[CategoryResponse])
async def create_category(body: CategoryCreateRequest, admin: AdminActor, service: Articles):
    category = await service.create_category(body.model_dump())
    return ok(CategoryResponse.model_validate(category))
