"""
Comment API routes.

Static paths are registered ahead of ``/{comment_id}`` so they are never
captured as an id.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Path, Request

from api.dependencies import (
    MAX_PAGE_SIZE,
    AdminActor,
    Comments,
    CurrentActor,
    Page20,
    normalize_limit,
    parse_int,
)
from api.middleware.rate_limit import get_client_ip, get_rate_limit, limiter
from api.response import ok
from api.schemas.comment import (
    AuthorReplyRequest,
    AuthorReplyResponse,
    BatchCommentRequest,
    CommentCreateRequest,
    CommentListResult,
    CommentNodeResponse,
    CommentResponse,
    CommentStatsResult,
    ReplyCreateRequest,
    ReportCreateRequest,
    ReportResponse,
    UserCommentStatsResult,
)
from api.schemas.common import BatchResult, Envelope
from core.errors import APIError, ErrorKind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/comments", tags=["comments"])

CommentId = Annotated[int, Path(ge=1)]

SORT_OPTIONS = ("hot", "like", "time", "time_asc")
HOT_COMMENTS_DEFAULT = 10


def _require_target(target_type: Optional[str], target_id: Optional[str]) -> tuple[int, int]:
    """Both target parameters as positive integers, else a bad request."""
    parsed_type = parse_int(target_type, 0)
    parsed_id = parse_int(target_id, 0)
    if parsed_type < 1 or parsed_id < 1:
        raise APIError(ErrorKind.INVALID, "target_type and target_id are required")
    return parsed_type, parsed_id


# ============================================================================
# Static paths
# ============================================================================


@router.get("/root", response_model=Envelope[CommentListResult])
async def list_root_comments(
    service: Comments,
    paging: Page20,
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
    sort_by: str = "hot",
):
    """Top-level comments of a target, pinned first."""
    parsed_type, parsed_id = _require_target(target_type, target_id)
    comments, total = await service.list_root_comments(
        parsed_type,
        parsed_id,
        sort_by if sort_by in SORT_OPTIONS else "hot",
        paging.page,
        paging.page_size,
    )
    return ok(
        CommentListResult(
            comments=[CommentResponse.model_validate(c) for c in comments],
            total=total,
            page=paging.page,
            page_size=paging.page_size,
        )
    )


@router.get("/hot", response_model=Envelope[list[CommentResponse]])
async def get_hot_comments(
    service: Comments,
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
    limit: Optional[str] = None,
):
    parsed_type, parsed_id = _require_target(target_type, target_id)
    count = normalize_limit(
        parse_int(limit, HOT_COMMENTS_DEFAULT), HOT_COMMENTS_DEFAULT, MAX_PAGE_SIZE
    )
    comments = await service.get_hot_comments(parsed_type, parsed_id, count)
    return ok([CommentResponse.model_validate(c) for c in comments])


@router.get("/stats", response_model=Envelope[CommentStatsResult])
async def get_comment_stats(
    service: Comments,
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
):
    parsed_type, parsed_id = _require_target(target_type, target_id)
    stats = await service.get_comment_stats(parsed_type, parsed_id)
    return ok(CommentStatsResult.model_validate(stats))


@router.get("/my-stats", response_model=Envelope[UserCommentStatsResult])
async def get_my_comment_stats(actor: CurrentActor, service: Comments):
    stats = await service.get_user_comment_stats(actor.actor_id)
    return ok(UserCommentStatsResult.model_validate(stats))


@router.post("/root", response_model=Envelope[CommentResponse])
@limiter.limit(get_rate_limit("comment"))
async def create_root_comment(
    request: Request,
    body: CommentCreateRequest,
    actor: CurrentActor,
    service: Comments,
):
    """Post a top-level comment. It takes the next floor on its target."""
    comment = await service.create_root_comment(
        actor.actor_id,
        body.model_dump(),
        ip=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ok(CommentResponse.model_validate(comment))


@router.post("/reply", response_model=Envelope[CommentResponse])
@limiter.limit(get_rate_limit("comment"))
async def create_reply(
    request: Request,
    body: ReplyCreateRequest,
    actor: CurrentActor,
    service: Comments,
):
    comment = await service.create_reply(
        actor.actor_id,
        body.model_dump(),
        ip=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ok(CommentResponse.model_validate(comment))


@router.post("/batch-delete", response_model=Envelope[BatchResult])
async def batch_delete_comments(body: BatchCommentRequest, admin: AdminActor, service: Comments):
    affected = await service.batch_delete(admin.actor_id, body.comment_ids)
    return ok(BatchResult(affected=affected))


@router.post("/batch-fold", response_model=Envelope[BatchResult])
async def batch_fold_comments(body: BatchCommentRequest, admin: AdminActor, service: Comments):
    affected = await service.batch_fold(admin.actor_id, body.comment_ids)
    return ok(BatchResult(affected=affected))


# ============================================================================
# Single comment
# ============================================================================


@router.get("/{comment_id}", response_model=Envelope[CommentResponse])
async def get_comment(comment_id: CommentId, service: Comments):
    comment = await service.get_comment(comment_id)
    return ok(CommentResponse.model_validate(comment))


@router.get("/{comment_id}/replies", response_model=Envelope[CommentListResult])
async def list_replies(comment_id: CommentId, service: Comments, paging: Page20):
    """Direct replies, oldest first."""
    replies, total = await service.list_replies(comment_id, paging.page, paging.page_size)
    return ok(
        CommentListResult(
            comments=[CommentResponse.model_validate(c) for c in replies],
            total=total,
            page=paging.page,
            page_size=paging.page_size,
        )
    )


@router.get("/{comment_id}/tree", response_model=Envelope[CommentNodeResponse])
async def get_comment_tree(comment_id: CommentId, service: Comments):
    node = await service.get_comment_tree(comment_id)
    return ok(CommentNodeResponse.from_node(node))


@router.delete("/{comment_id}", response_model=Envelope[None])
async def delete_comment(comment_id: CommentId, actor: CurrentActor, service: Comments):
    """Delete a comment. Owners may delete their own; admins may delete any."""
    await service.delete_comment(actor.actor_id, comment_id, is_admin=actor.is_admin)
    return ok()


@router.post("/{comment_id}/like", response_model=Envelope[None])
async def like_comment(comment_id: CommentId, actor: CurrentActor, service: Comments):
    await service.like_comment(actor.actor_id, comment_id)
    return ok()


@router.delete("/{comment_id}/like", response_model=Envelope[None])
async def unlike_comment(comment_id: CommentId, actor: CurrentActor, service: Comments):
    await service.unlike_comment(actor.actor_id, comment_id)
    return ok()


@router.post("/{comment_id}/dislike", response_model=Envelope[None])
async def dislike_comment(comment_id: CommentId, actor: CurrentActor, service: Comments):
    await service.dislike_comment(actor.actor_id, comment_id)
    return ok()


@router.delete("/{comment_id}/dislike", response_model=Envelope[None])
async def undislike_comment(comment_id: CommentId, actor: CurrentActor, service: Comments):
    await service.undislike_comment(actor.actor_id, comment_id)
    return ok()


@router.post("/{comment_id}/report", response_model=Envelope[ReportResponse])
@limiter.limit(get_rate_limit("report"))
async def report_comment(
    request: Request,
    comment_id: CommentId,
    body: ReportCreateRequest,
    actor: CurrentActor,
    service: Comments,
):
    report = await service.report_comment(
        actor.actor_id, comment_id, body.reason_type, body.reason_desc
    )
    return ok(ReportResponse.model_validate(report))


# ============================================================================
# Author actions
# ============================================================================


@router.post("/{comment_id}/author-reply", response_model=Envelope[AuthorReplyResponse])
async def add_author_reply(
    comment_id: CommentId,
    body: AuthorReplyRequest,
    actor: CurrentActor,
    service: Comments,
):
    reply = await service.add_author_reply(actor.actor_id, comment_id, body.content)
    return ok(AuthorReplyResponse.model_validate(reply))


@router.post("/{comment_id}/pin", response_model=Envelope[None])
async def pin_comment(comment_id: CommentId, actor: CurrentActor, service: Comments):
    await service.set_pinned(actor.actor_id, comment_id, True)
    return ok()


@router.delete("/{comment_id}/pin", response_model=Envelope[None])
async def unpin_comment(comment_id: CommentId, actor: CurrentActor, service: Comments):
    await service.set_pinned(actor.actor_id, comment_id, False)
    return ok()


@router.post("/{comment_id}/feature", response_model=Envelope[None])
async def feature_comment(comment_id: CommentId, actor: CurrentActor, service: Comments):
    await service.set_featured(actor.actor_id, comment_id, True)
    return ok()


@router.delete("/{comment_id}/feature", response_model=Envelope[None])
async def unfeature_comment(comment_id: CommentId, actor: CurrentActor, service: Comments):
    await service.set_featured(actor.actor_id, comment_id, False)
    return ok()
