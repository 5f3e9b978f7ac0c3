"""Activities router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.api.deps import get_activity_service, get_current_user, get_session
from devjournal.api.schemas.activity import ActivityItem
from devjournal.api.schemas.common import PageMeta, PaginatedResponse
from devjournal.models.user import User
from devjournal.services.activity_service import ActivityService

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[ActivityItem])
async def list_activities(
    cursor: str | None = Query(None),
    page_size: int = Query(50, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: ActivityService = Depends(get_activity_service),
) -> PaginatedResponse[ActivityItem]:
    result = await svc.list(session, user.id, cursor=cursor, page_size=page_size)
    return PaginatedResponse(
        data=[ActivityItem.model_validate(a) for a in result["data"]],
        meta=PageMeta(
            next_cursor=result["next_cursor"],
            has_more=result["has_more"],
            total=result["total"],
        ),
    )
