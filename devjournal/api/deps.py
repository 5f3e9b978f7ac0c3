"""Dependency injection — session, auth, and service singletons."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from devjournal.dao.activity_dao import ActivityDAO
from devjournal.dao.integration_dao import IntegrationDAO
from devjournal.dao.settings_dao import SettingsDAO
from devjournal.dao.summary_dao import SummaryDAO
from devjournal.dao.user_dao import UserDAO
from devjournal.engines.activity_ingest.github_client import GITHUB_API_URL, GitHubClient
from devjournal.engines.activity_ingest.runner import ActivitySyncRunner
from devjournal.engines.activity_ingest.webhook import WebhookReceiver
from devjournal.models.user import User
from devjournal.services import (
    STORE_CONNECTION_ERRORS,
    AuthenticationError,
    StoreUnavailableError,
)
from devjournal.services.activity_service import ActivityService
from devjournal.services.analytics_service import AnalyticsService
from devjournal.services.auth_service import AuthService
from devjournal.services.journal_service import JournalService
from devjournal.services.settings_service import SettingsService

log = structlog.get_logger("devjournal.api")

# ---------------------------------------------------------------------------
# DAO singletons
# ---------------------------------------------------------------------------
_user_dao = UserDAO()
_activity_dao = ActivityDAO()
_settings_dao = SettingsDAO()
_summary_dao = SummaryDAO()
_integration_dao = IntegrationDAO()

# ---------------------------------------------------------------------------
# Service singletons
# ---------------------------------------------------------------------------
_auth_service = AuthService(_user_dao)
_activity_service = ActivityService(_activity_dao)
_settings_service = SettingsService(_settings_dao, _user_dao, _integration_dao)
_journal_service = JournalService(_summary_dao, _activity_dao)
_analytics_service = AnalyticsService(_activity_dao)
_sync_runner = ActivitySyncRunner(_settings_service, _activity_service)
_webhook_receiver = WebhookReceiver(_settings_service, _activity_service)

# ---------------------------------------------------------------------------
# Engine / session factory (initialised by app lifespan)
# ---------------------------------------------------------------------------
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_session_factory(
    database_url: str | None = None,
) -> async_sessionmaker[AsyncSession] | None:
    """Create the async engine and session factory. Called once at startup.

    Without ``DEVJOURNAL_DATABASE_URL`` the store is left unavailable and
    every store-backed request fails with :class:`StoreUnavailableError`.
    """
    global _engine, _session_factory  # noqa: PLW0603
    url = database_url or os.environ.get("DEVJOURNAL_DATABASE_URL")
    if not url:
        log.warning("store.unavailable", reason="DEVJOURNAL_DATABASE_URL is not set")
        _engine = None
        _session_factory = None
        return None
    _engine = create_async_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_recycle=1800,
    )
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    """Dispose the async engine, closing all pooled connections."""
    global _engine  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def set_session_factory(factory: async_sessionmaker[AsyncSession] | None) -> None:
    """Override session factory (for testing)."""
    global _session_factory  # noqa: PLW0603
    _session_factory = factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a per-request session with automatic commit/rollback.

    Connection failures surfacing anywhere in the request, including the
    final commit, are re-raised as :class:`StoreUnavailableError`.
    """
    if _session_factory is None:
        raise StoreUnavailableError("database connection not available")
    async with _session_factory() as session:
        try:
            async with session.begin():
                yield session
        except STORE_CONNECTION_ERRORS as exc:
            log.error("store.unreachable", error=str(exc))
            raise StoreUnavailableError("database connection not available") from exc


# ---------------------------------------------------------------------------
# Auth dependency
# ---------------------------------------------------------------------------

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> User:
    """Extract and validate Bearer token, return the authenticated User."""
    if credentials is None:
        raise AuthenticationError("missing authorization header")
    return await _auth_service.get_current_user(session, credentials.credentials)


# ---------------------------------------------------------------------------
# GitHub client
# ---------------------------------------------------------------------------

GitHubClientFactory = Callable[[User], GitHubClient]


def _github_client_for(user: User) -> GitHubClient:
    if not user.github_access_token:
        raise AuthenticationError("no GitHub access token on record")
    return GitHubClient(
        user.github_access_token,
        base_url=os.environ.get("DEVJOURNAL_GITHUB_API_URL", GITHUB_API_URL),
    )


def get_github_client_factory() -> GitHubClientFactory:
    return _github_client_for


# ---------------------------------------------------------------------------
# Service getters (for Depends())
# ---------------------------------------------------------------------------


def get_auth_service() -> AuthService:
    return _auth_service


def get_activity_service() -> ActivityService:
    return _activity_service


def get_settings_service() -> SettingsService:
    return _settings_service


def get_journal_service() -> JournalService:
    return _journal_service


def get_analytics_service() -> AnalyticsService:
    return _analytics_service


def get_sync_runner() -> ActivitySyncRunner:
    return _sync_runner


def get_webhook_receiver() -> WebhookReceiver:
    return _webhook_receiver
