"""ActivitySyncRunner — fetch → normalize → deduplicating write, per user."""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.core.github import split_full_name
from devjournal.engines.activity_ingest.github_client import GitHubClient
from devjournal.engines.activity_ingest.models import NormalizedActivity, SyncResult
from devjournal.engines.activity_ingest.normalizer import normalize_feed
from devjournal.models.user import User
from devjournal.services import SourceUnavailableError
from devjournal.services.activity_service import ActivityService
from devjournal.services.settings_service import SettingsService

log = structlog.get_logger("devjournal.engine")

_OVERVIEW_REPOSITORIES = 10


class ActivitySyncRunner:
    """Orchestration layer: GitHub feeds → normalizer → ActivityService."""

    def __init__(
        self, settings_service: SettingsService, activity_service: ActivityService
    ) -> None:
        self._settings_service = settings_service
        self._activity_service = activity_service

    async def sync_user(
        self,
        session: AsyncSession,
        user: User,
        client: GitHubClient,
    ) -> SyncResult:
        """Pull recent activity for *user* and persist what is new.

        1. Read the tracking preference via SettingsService
        2. Empty list → the user's own event feed; otherwise each tracked repo
        3. Normalize and store through ActivityService

        A failing tracked repository is logged and recorded in
        ``result.errors``; the others are still synced. ``result.inserted``
        is always the number of rows actually persisted.
        """
        result = SyncResult(user_id=user.id)
        tracked = await self._settings_service.get_tracked_repositories(session, user.id)

        if not tracked:
            result.mode = "all"
            events = await client.get_user_events(user.login)
            await self._ingest(session, user, events, None, result)
            result.repositories["*"] = "ok"
        else:
            result.mode = "tracked"
            for full_name in tracked:
                await self._sync_repository(session, user, client, full_name, result)

        log.info(
            "sync.completed",
            user_id=str(user.id),
            mode=result.mode,
            fetched=result.fetched,
            inserted=result.inserted,
            errors=len(result.errors),
        )
        return result

    async def fetch_overview(self, client: GitHubClient) -> dict[str, Any]:
        """Profile and most recently updated repositories, fetched together."""
        profile, repositories = await asyncio.gather(
            client.get_user(),
            client.get_user_repositories(),
        )
        return {"user": profile, "repositories": repositories[:_OVERVIEW_REPOSITORIES]}

    # ── internal ───────────────────────────────────────────────────────────

    async def _sync_repository(
        self,
        session: AsyncSession,
        user: User,
        client: GitHubClient,
        full_name: str,
        result: SyncResult,
    ) -> None:
        try:
            owner, repo = split_full_name(full_name)
        except ValueError as exc:
            result.errors.append(str(exc))
            result.repositories[full_name] = str(exc)
            return

        try:
            events = await client.get_repository_events(owner, repo)
        except SourceUnavailableError as exc:
            log.warning(
                "sync.repo_failed",
                user_id=str(user.id),
                repository=full_name,
                status=exc.status_code,
                error=str(exc),
            )
            result.errors.append(f"{full_name}: {exc}")
            result.repositories[full_name] = str(exc)
            return

        await self._ingest(session, user, events, f"{owner}/{repo}", result)
        result.repositories[full_name] = "ok"

    async def _ingest(
        self,
        session: AsyncSession,
        user: User,
        events: list[dict[str, Any]],
        repository: str | None,
        result: SyncResult,
    ) -> None:
        activities, unhandled = normalize_feed(events, repository)
        if unhandled:
            log.debug(
                "sync.unhandled_events",
                repository=repository,
                types=sorted(set(unhandled)),
            )

        result.fetched += len(events)
        result.normalized += len(activities)
        _merge_counts(result.by_kind, activities)
        result.inserted += await self._activity_service.store_activities(
            session, user.id, activities
        )


def _merge_counts(target: dict[str, int], activities: list[NormalizedActivity]) -> None:
    for kind, n in Counter(a.kind for a in activities).items():
        target[kind] = target.get(kind, 0) + n
