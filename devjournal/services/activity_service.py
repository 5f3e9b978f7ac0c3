"""ActivityService — activity listing and the deduplicating store writer."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.dao.activity_dao import ActivityDAO
from devjournal.engines.activity_ingest.models import NormalizedActivity
from devjournal.services import STORE_CONNECTION_ERRORS, StoreUnavailableError

log = structlog.get_logger("devjournal.service")


class ActivityService:
    """Stateless service for activity records."""

    def __init__(self, activity_dao: ActivityDAO) -> None:
        self._activity_dao = activity_dao

    async def list(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        cursor: str | None = None,
        page_size: int = 50,
    ) -> dict:
        """Return the user's activities, most recently ingested first."""
        page = await self._activity_dao.list_paginated(session, user_id, cursor, page_size)
        total = await self._activity_dao.count_for_user(session, user_id)
        return {
            "data": page.data,
            "next_cursor": page.next_cursor,
            "has_more": page.has_more,
            "total": total,
        }

    async def store_activities(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        candidates: list[NormalizedActivity],
    ) -> int:
        """Persist the candidates whose URL is new for *user_id*.

        Already-stored URLs and repeats inside *candidates* are dropped, the
        remainder goes out in a single insert. Existing rows are never
        touched. Returns the number of rows written.

        Raises :class:`StoreUnavailableError` if the database cannot be reached.
        """
        if not candidates:
            return 0

        try:
            existing = await self._activity_dao.list_existing_urls(
                session, user_id, list({c.url for c in candidates})
            )
            fresh: list[dict] = []
            seen: set[str] = set(existing)
            for candidate in candidates:
                if candidate.url in seen:
                    continue
                seen.add(candidate.url)
                fresh.append(candidate.to_row(user_id))

            if not fresh:
                return 0
            inserted = await self._activity_dao.batch_create(session, fresh)
        except STORE_CONNECTION_ERRORS as exc:
            raise StoreUnavailableError("database connection not available") from exc

        log.debug(
            "activities.stored",
            user_id=str(user_id),
            candidates=len(candidates),
            inserted=inserted,
        )
        return inserted
