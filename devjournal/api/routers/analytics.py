"""Analytics router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.api.deps import get_analytics_service, get_current_user, get_session
from devjournal.api.schemas.analytics import DashboardResponse
from devjournal.models.user import User
from devjournal.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/", response_model=DashboardResponse)
async def get_dashboard(
    range: str = Query("month"),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: AnalyticsService = Depends(get_analytics_service),
) -> DashboardResponse:
    return DashboardResponse(**await svc.get_dashboard(session, user.id, range))
