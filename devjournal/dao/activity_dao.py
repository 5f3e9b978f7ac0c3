"""ActivityDAO — activities table operations."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.dao.base import BaseDAO, Page
from devjournal.models.activity import Activity

# When the activity happened upstream, or when we first saw it.
activity_time = func.coalesce(Activity.occurred_at, Activity.created_at)


class ActivityDAO(BaseDAO[Activity]):
    model = Activity

    # ── read ──────────────────────────────────────────────────────────────

    async def list_paginated(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        cursor: str | None = None,
        page_size: int = 50,
    ) -> Page[Activity]:
        query = select(Activity).where(Activity.user_id == user_id)
        return await self.paginate(session, query, cursor, page_size)

    async def count_for_user(self, session: AsyncSession, user_id: uuid.UUID) -> int:
        return await self.count(session, select(Activity).where(Activity.user_id == user_id))

    async def list_existing_urls(
        self, session: AsyncSession, user_id: uuid.UUID, urls: list[str]
    ) -> set[str]:
        """Return the subset of *urls* already stored for *user_id*."""
        if not urls:
            return set()
        stmt = select(Activity.url).where(Activity.user_id == user_id, Activity.url.in_(urls))
        result = await session.execute(stmt)
        return set(result.scalars().all())

    async def list_recent(
        self, session: AsyncSession, user_id: uuid.UUID, limit: int
    ) -> list[Activity]:
        """Most recently ingested activities, newest first."""
        stmt = (
            select(Activity)
            .where(Activity.user_id == user_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        since: datetime | None = None,
    ) -> list[Activity]:
        """All activities of a user ordered by activity time (newest first)."""
        stmt = select(Activity).where(Activity.user_id == user_id)
        if since is not None:
            stmt = stmt.where(activity_time >= since)
        stmt = stmt.order_by(activity_time.desc(), Activity.id.desc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    # ── write ─────────────────────────────────────────────────────────────

    async def batch_create(self, session: AsyncSession, rows: list[dict[str, Any]]) -> int:
        """Insert activities in one statement, skipping already-known URLs.

        ON CONFLICT (user_id, url) DO NOTHING closes the race between two
        concurrent ingestions for the same user.
        Returns the number of rows actually inserted.
        """
        if not rows:
            return 0

        stmt = (
            insert(Activity)
            .values(rows)
            .on_conflict_do_nothing(constraint="uq_activities_user_url")
        )
        result = await session.execute(stmt)
        return result.rowcount
