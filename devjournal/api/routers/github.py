"""GitHub router — on-demand sync and account overview."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.api.deps import (
    GitHubClientFactory,
    get_current_user,
    get_github_client_factory,
    get_session,
    get_sync_runner,
)
from devjournal.api.middleware.rate_limit import rate_limit
from devjournal.api.schemas.github import OverviewResponse, SyncResponse
from devjournal.engines.activity_ingest.runner import ActivitySyncRunner
from devjournal.models.user import User

router = APIRouter()


@router.post("/sync", response_model=SyncResponse, dependencies=[Depends(rate_limit("sync"))])
async def sync(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    runner: ActivitySyncRunner = Depends(get_sync_runner),
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
) -> SyncResponse:
    async with client_factory(user) as client:
        result = await runner.sync_user(session, user, client)
    return SyncResponse(
        message=f"Synced {result.inserted} new activities",
        activities_count=result.inserted,
        fetched=result.fetched,
        by_kind=result.by_kind,
        repositories=result.repositories,
        errors=result.errors,
    )


@router.get("/sync", response_model=OverviewResponse, dependencies=[Depends(rate_limit("api"))])
async def overview(
    user: User = Depends(get_current_user),
    runner: ActivitySyncRunner = Depends(get_sync_runner),
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
) -> OverviewResponse:
    async with client_factory(user) as client:
        result = await runner.fetch_overview(client)
    return OverviewResponse(**result)
