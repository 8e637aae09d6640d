"""
Draft API routes. Every draft is private to its owner.
"""

from typing import Annotated

from fastapi import APIRouter, Path, Request

from api.dependencies import Articles, CurrentActor, Page20
from api.middleware.rate_limit import get_rate_limit, limiter
from api.response import ok
from api.schemas.article import (
    ArticleResponse,
    DraftListResult,
    DraftResponse,
    DraftSaveRequest,
    DraftUpdateRequest,
)
from api.schemas.common import Envelope

router = APIRouter(prefix="/drafts", tags=["drafts"])

DraftId = Annotated[int, Path(ge=1)]


@router.post("", response_model=Envelope[DraftResponse])
async def save_draft(body: DraftSaveRequest, actor: CurrentActor, service: Articles):
    draft = await service.save_draft(actor.actor_id, body.model_dump())
    return ok(DraftResponse.model_validate(draft))


@router.get("", response_model=Envelope[DraftListResult])
async def list_drafts(actor: CurrentActor, service: Articles, paging: Page20):
    drafts, total = await service.list_drafts(actor.actor_id, paging.page, paging.page_size)
    return ok(
        DraftListResult(
            drafts=[DraftResponse.model_validate(draft) for draft in drafts],
            total=total,
            page=paging.page,
            page_size=paging.page_size,
        )
    )


@router.get("/{draft_id}", response_model=Envelope[DraftResponse])
async def get_draft(draft_id: DraftId, actor: CurrentActor, service: Articles):
    draft = await service.get_draft(actor.actor_id, draft_id)
    return ok(DraftResponse.model_validate(draft))


@router.put("/{draft_id}", response_model=Envelope[DraftResponse])
async def update_draft(
    draft_id: DraftId,
    body: DraftUpdateRequest,
    actor: CurrentActor,
    service: Articles,
):
    """Save over a draft. Each save increments its auto-save counter."""
    draft = await service.update_draft(
        actor.actor_id, draft_id, body.model_dump(exclude_unset=True)
    )
    return ok(DraftResponse.model_validate(draft))


@router.delete("/{draft_id}", response_model=Envelope[None])
async def delete_draft(draft_id: DraftId, actor: CurrentActor, service: Articles):
    await service.delete_draft(actor.actor_id, draft_id)
    return ok()


@router.post("/{draft_id}/publish", response_model=Envelope[ArticleResponse])
@limiter.limit(get_rate_limit("publish"))
async def publish_draft(
    request: Request,
    draft_id: DraftId,
    actor: CurrentActor,
    service: Articles,
):
    """Turn a draft into a published article. A draft publishes only once."""
    article = await service.publish_draft(actor.actor_id, draft_id)
    return ok(ArticleResponse.model_validate(article))
