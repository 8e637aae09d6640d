"""
Article API routes.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Path, Request

from api.dependencies import Articles, CurrentActor, OptionalActor, Page20
from api.middleware.rate_limit import get_rate_limit, limiter
from api.response import ok
from api.schemas.article import (
    ArticleCreateRequest,
    ArticleDetailResult,
    ArticleHistoryResponse,
    ArticleListItem,
    ArticleListResult,
    ArticleResponse,
    ArticleUpdateRequest,
)
from api.schemas.common import Envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/articles", tags=["articles"])

ArticleId = Annotated[int, Path(ge=1)]

SORT_OPTIONS = ("hot", "like", "time")


@router.get("", response_model=Envelope[ArticleListResult])
async def list_articles(
    service: Articles,
    paging: Page20,
    sort_by: str = "hot",
    category_id: Optional[int] = None,
    column_id: Optional[int] = None,
    keyword: Optional[str] = None,
):
    """
    List published public articles.

    Sorted by hotness by default; ``like`` and ``time`` are also accepted.
    """
    articles, total = await service.list_articles(
        sort_by=sort_by if sort_by in SORT_OPTIONS else "hot",
        category_id=category_id,
        column_id=column_id,
        keyword=keyword,
        page=paging.page,
        page_size=paging.page_size,
    )
    return ok(
        ArticleListResult(
            articles=[ArticleListItem.from_summary(summary) for summary in articles],
            total=total,
            page=paging.page,
            page_size=paging.page_size,
        )
    )


@router.get("/{article_id}", response_model=Envelope[ArticleDetailResult])
async def get_article(article_id: ArticleId, service: Articles, viewer: OptionalActor):
    """
    Get an article with its body, author and category.

    Counts as a view.
    """
    detail = await service.get_article(article_id, viewer.actor_id if viewer else None)
    return ok(ArticleDetailResult.model_validate(detail))


@router.get("/{article_id}/history", response_model=Envelope[list[ArticleHistoryResponse]])
async def get_article_history(article_id: ArticleId, service: Articles):
    history = await service.get_article_history(article_id)
    return ok([ArticleHistoryResponse.model_validate(entry) for entry in history])


@router.post("", response_model=Envelope[ArticleResponse])
@limiter.limit(get_rate_limit("publish"))
async def create_article(
    request: Request,
    body: ArticleCreateRequest,
    actor: CurrentActor,
    service: Articles,
):
    """Publish a new article immediately."""
    article = await service.create_article(actor.actor_id, body.model_dump())
    return ok(ArticleResponse.model_validate(article))


@router.put("/{article_id}", response_model=Envelope[ArticleResponse])
async def update_article(
    article_id: ArticleId,
    body: ArticleUpdateRequest,
    actor: CurrentActor,
    service: Articles,
):
    """Edit an article. Only fields present in the body are changed."""
    article = await service.update_article(
        actor.actor_id, article_id, body.model_dump(exclude_unset=True)
    )
    return ok(ArticleResponse.model_validate(article))


@router.delete("/{article_id}", response_model=Envelope[None])
async def delete_article(article_id: ArticleId, actor: CurrentActor, service: Articles):
    await service.delete_article(actor.actor_id, article_id)
    return ok()
