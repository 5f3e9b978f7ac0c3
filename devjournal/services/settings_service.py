"""SettingsService — tracked repositories, journal preferences and integrations."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.core.github import is_full_name
from devjournal.dao.integration_dao import IntegrationDAO
from devjournal.dao.settings_dao import SettingsDAO
from devjournal.dao.user_dao import UserDAO
from devjournal.models.integration import INTEGRATION_PROVIDERS
from devjournal.services import NotFoundError, ValidationError

FREQUENCIES = ("daily", "weekly")

# Preferences a PUT must carry in full.
REQUIRED_PREFERENCE_FIELDS = (
    "auto_post_to_twitter",
    "auto_post_to_linkedin",
    "auto_post_to_notion",
    "summary_frequency",
    "email_digest_enabled",
    "email_digest_frequency",
    "ai_prompt_style",
    "is_public",
)

DEFAULT_PREFERENCES: dict[str, Any] = {
    "auto_post_to_twitter": False,
    "auto_post_to_linkedin": False,
    "auto_post_to_notion": False,
    "summary_frequency": "weekly",
    "email_digest_enabled": False,
    "email_digest_frequency": "weekly",
    "ai_prompt_style": "developer",
}

PROVIDER_NAMES = {
    "twitter": "Twitter/X",
    "linkedin": "LinkedIn",
    "notion": "Notion",
    "medium": "Medium",
}


class SettingsService:
    """Stateless service for per-user settings."""

    def __init__(
        self,
        settings_dao: SettingsDAO,
        user_dao: UserDAO,
        integration_dao: IntegrationDAO,
    ) -> None:
        self._settings_dao = settings_dao
        self._user_dao = user_dao
        self._integration_dao = integration_dao

    # -- tracking preference -------------------------------------------------

    async def get_tracked_repositories(
        self, session: AsyncSession, user_id: uuid.UUID
    ) -> list[str]:
        """Return the tracked list; a user without settings tracks nothing."""
        row = await self._settings_dao.get_by_user(session, user_id)
        if row is None:
            return []
        return list(row.tracked_repositories or [])

    async def set_tracking(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        repository: str,
        is_tracked: bool,
    ) -> list[str]:
        """Add or remove *repository* from the tracked list, keeping order.

        Raises :class:`ValidationError` if *repository* is not ``owner/repo``.
        """
        repository = (repository or "").strip()
        if not repository:
            raise ValidationError("repository name is required")
        if not is_full_name(repository):
            raise ValidationError(f"repository must be 'owner/repo': {repository!r}")

        row = await self._settings_dao.get_or_create(session, user_id)
        tracked = list(row.tracked_repositories or [])
        if is_tracked:
            if repository not in tracked:
                tracked.append(repository)
        else:
            tracked = [r for r in tracked if r != repository]

        await self._settings_dao.set_tracked_repositories(session, user_id, tracked)
        return tracked

    async def list_users_tracking(
        self, session: AsyncSession, repository: str
    ) -> list[uuid.UUID]:
        return await self._settings_dao.list_user_ids_tracking(session, repository)

    # -- preferences ---------------------------------------------------------

    async def get_preferences(self, session: AsyncSession, user_id: uuid.UUID) -> dict:
        user = await self._user_dao.get_by_id(session, user_id)
        if user is None:
            raise NotFoundError("user not found")
        row = await self._settings_dao.get_by_user(session, user_id)
        if row is None:
            prefs = dict(DEFAULT_PREFERENCES)
            prefs["tracked_repositories"] = []
        else:
            prefs = {key: getattr(row, key) for key in DEFAULT_PREFERENCES}
            prefs["tracked_repositories"] = list(row.tracked_repositories or [])
        prefs["is_public"] = bool(user.is_public)
        return prefs

    async def update_preferences(
        self, session: AsyncSession, user_id: uuid.UUID, values: dict[str, Any]
    ) -> dict:
        """Overwrite all preferences.

        Raises :class:`ValidationError` naming the first missing or invalid field.
        """
        for name in REQUIRED_PREFERENCE_FIELDS:
            if values.get(name) is None:
                raise ValidationError(f"missing required field: {name}")
        for name in ("summary_frequency", "email_digest_frequency"):
            if values[name] not in FREQUENCIES:
                raise ValidationError(f"{name} must be one of {', '.join(FREQUENCIES)}")

        user = await self._user_dao.get_by_id(session, user_id)
        if user is None:
            raise NotFoundError("user not found")

        await self._settings_dao.upsert_preferences(
            session, user_id, **{key: values[key] for key in DEFAULT_PREFERENCES}
        )
        user.is_public = bool(values["is_public"])
        await session.flush()
        return await self.get_preferences(session, user_id)

    # -- repository listing --------------------------------------------------

    async def list_repositories(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        repositories: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Annotate upstream repositories with an ``is_tracked`` flag."""
        tracked = set(await self.get_tracked_repositories(session, user_id))
        return [{**repo, "is_tracked": repo.get("full_name") in tracked} for repo in repositories]

    # -- integrations --------------------------------------------------------

    async def list_integrations(
        self, session: AsyncSession, user_id: uuid.UUID
    ) -> list[dict[str, Any]]:
        """Every supported provider, flagged with the user's connection state.

        ``last_sync`` is the provider row's last update, active or not.
        """
        rows = {
            row.provider: row
            for row in await self._integration_dao.list_for_user(session, user_id)
        }
        integrations = []
        for provider in INTEGRATION_PROVIDERS:
            row = rows.get(provider)
            integrations.append(
                {
                    "id": provider,
                    "provider": provider,
                    "name": PROVIDER_NAMES[provider],
                    "is_connected": bool(row is not None and row.is_active),
                    "last_sync": row.updated_at if row is not None else None,
                }
            )
        return integrations
