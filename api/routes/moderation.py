"""
Moderation API routes: report review and the sensitive word list.

All routes require an admin role claim.
"""

from typing import Annotated

from fastapi import APIRouter, Path

from api.dependencies import AdminActor, Comments, Page20
from api.response import ok
from api.schemas.comment import (
    ReportHandleRequest,
    ReportListResult,
    ReportResponse,
    SensitiveWordCreateRequest,
    SensitiveWordResponse,
)
from api.schemas.common import Envelope

router = APIRouter(tags=["moderation"])


@router.get("/reports/pending", response_model=Envelope[ReportListResult])
async def list_pending_reports(admin: AdminActor, service: Comments, paging: Page20):
    """Reports awaiting review, oldest first."""
    reports, total = await service.list_pending_reports(paging.page, paging.page_size)
    return ok(
        ReportListResult(
            reports=[ReportResponse.model_validate(r) for r in reports],
            total=total,
            page=paging.page,
            page_size=paging.page_size,
        )
    )


@router.post("/reports/{report_id}/handle", response_model=Envelope[ReportResponse])
async def handle_report(
    report_id: Annotated[int, Path(ge=1)],
    body: ReportHandleRequest,
    admin: AdminActor,
    service: Comments,
):
    """Close a report. An upheld report deletes the comment."""
    report = await service.handle_report(admin.actor_id, report_id, body.result, body.approved)
    return ok(ReportResponse.model_validate(report))


@router.get("/sensitive-words", response_model=Envelope[list[SensitiveWordResponse]])
async def list_sensitive_words(admin: AdminActor, service: Comments):
    words = await service.list_sensitive_words()
    return ok([SensitiveWordResponse.model_validate(w) for w in words])


@router.post("/sensitive-words", response_model=Envelope[SensitiveWordResponse])
async def add_sensitive_word(
    body: SensitiveWordCreateRequest,
    admin: AdminActor,
    service: Comments,
):
    word = await service.add_sensitive_word(body.model_dump())
    return ok(SensitiveWordResponse.model_validate(word))
