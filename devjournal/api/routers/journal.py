"""Journal router — list, generate, publish."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.api.deps import get_current_user, get_journal_service, get_session
from devjournal.api.schemas.common import PageMeta, PaginatedResponse
from devjournal.api.schemas.journal import GenerateRequest, SummaryItem
from devjournal.models.user import User
from devjournal.services.journal_service import JournalService

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[SummaryItem])
async def list_summaries(
    cursor: str | None = Query(None),
    page_size: int = Query(20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: JournalService = Depends(get_journal_service),
) -> PaginatedResponse[SummaryItem]:
    result = await svc.list(session, user.id, cursor=cursor, page_size=page_size)
    return PaginatedResponse(
        data=[SummaryItem.model_validate(s) for s in result["data"]],
        meta=PageMeta(
            next_cursor=result["next_cursor"],
            has_more=result["has_more"],
            total=result["total"],
        ),
    )


@router.post("/generate", response_model=SummaryItem, status_code=201)
async def generate_summary(
    body: GenerateRequest,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: JournalService = Depends(get_journal_service),
) -> SummaryItem:
    summary = await svc.generate(session, user.id, body.period)
    return SummaryItem.model_validate(summary)


@router.post("/{summary_id}/publish", response_model=SummaryItem)
async def publish_summary(
    summary_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: JournalService = Depends(get_journal_service),
) -> SummaryItem:
    summary = await svc.publish(session, user.id, summary_id)
    return SummaryItem.model_validate(summary)
