"""SettingsDAO — user_settings table operations."""

import uuid
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.dao.base import BaseDAO
from devjournal.models.user_settings import UserSettings


class SettingsDAO(BaseDAO[UserSettings]):
    model = UserSettings

    async def get_by_user(self, session: AsyncSession, user_id: uuid.UUID) -> UserSettings | None:
        return await self.get_by_field(session, user_id=user_id)

    async def get_or_create(self, session: AsyncSession, user_id: uuid.UUID) -> UserSettings:
        """Return the settings row for *user_id*, creating a default one if missing."""
        stmt = (
            insert(UserSettings)
            .values(user_id=user_id)
            .on_conflict_do_nothing(index_elements=["user_id"])
            .returning(UserSettings)
        )
        result = await session.execute(stmt)
        row = result.scalars().first()
        if row is None:
            # Conflict — settings already existed, fetch them
            return await self.get_by_user(session, user_id)
        return row

    async def list_user_ids_tracking(
        self, session: AsyncSession, repository: str
    ) -> list[uuid.UUID]:
        """Users whose tracked list contains *repository* (GIN ``@>`` lookup)."""
        stmt = select(UserSettings.user_id).where(
            UserSettings.tracked_repositories.contains([repository])
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def set_tracked_repositories(
        self, session: AsyncSession, user_id: uuid.UUID, repositories: list[str]
    ) -> None:
        stmt = (
            update(UserSettings)
            .where(UserSettings.user_id == user_id)
            .values(tracked_repositories=repositories)
        )
        await session.execute(stmt)

    async def upsert_preferences(
        self, session: AsyncSession, user_id: uuid.UUID, **values: Any
    ) -> UserSettings:
        """Create or overwrite preference columns; tracked repositories are kept."""
        column_keys = set(UserSettings.__mapper__.column_attrs.keys())
        for key in values:
            if key not in column_keys or key in {"id", "user_id", "created_at", "updated_at"}:
                raise AttributeError(f"UserSettings has no writable column '{key}'")

        stmt = (
            insert(UserSettings)
            .values(user_id=user_id, **values)
            .on_conflict_do_update(index_elements=["user_id"], set_=values)
            .returning(UserSettings)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().one()
