"""Settings router — tracked repositories, preferences and integrations."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.api.deps import (
    GitHubClientFactory,
    get_current_user,
    get_github_client_factory,
    get_session,
    get_settings_service,
)
from devjournal.api.schemas.settings import (
    IntegrationItem,
    PreferencesResponse,
    PreferencesUpdate,
    RepositoryItem,
    TrackingRequest,
    TrackingResponse,
)
from devjournal.models.user import User
from devjournal.services.settings_service import SettingsService

router = APIRouter()


async def _repositories(
    session: AsyncSession,
    user: User,
    svc: SettingsService,
    client_factory: GitHubClientFactory,
) -> list[RepositoryItem]:
    async with client_factory(user) as client:
        upstream = await client.get_user_repositories()
    repos = await svc.list_repositories(session, user.id, upstream)
    return [RepositoryItem(**r) for r in repos]


@router.get("/repositories", response_model=list[RepositoryItem])
async def list_repositories(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: SettingsService = Depends(get_settings_service),
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
) -> list[RepositoryItem]:
    return await _repositories(session, user, svc, client_factory)


@router.post("/repositories/sync", response_model=list[RepositoryItem])
async def refresh_repositories(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: SettingsService = Depends(get_settings_service),
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
) -> list[RepositoryItem]:
    return await _repositories(session, user, svc, client_factory)


@router.post("/repositories", response_model=TrackingResponse)
async def set_tracking(
    body: TrackingRequest,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: SettingsService = Depends(get_settings_service),
) -> TrackingResponse:
    tracked = await svc.set_tracking(session, user.id, body.repository, body.is_tracked)
    return TrackingResponse(tracked_repositories=tracked)


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: SettingsService = Depends(get_settings_service),
) -> PreferencesResponse:
    return PreferencesResponse(**await svc.get_preferences(session, user.id))


@router.put("/preferences", response_model=PreferencesResponse)
async def update_preferences(
    body: PreferencesUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: SettingsService = Depends(get_settings_service),
) -> PreferencesResponse:
    prefs = await svc.update_preferences(session, user.id, body.model_dump())
    return PreferencesResponse(**prefs)


@router.get("/integrations", response_model=list[IntegrationItem])
async def list_integrations(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    svc: SettingsService = Depends(get_settings_service),
) -> list[IntegrationItem]:
    return [IntegrationItem(**i) for i in await svc.list_integrations(session, user.id)]
