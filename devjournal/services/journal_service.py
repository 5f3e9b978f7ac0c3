"""JournalService — summary generation, listing and publishing."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.dao.activity_dao import ActivityDAO
from devjournal.dao.summary_dao import SummaryDAO
from devjournal.engines.journal.template import render_summary
from devjournal.models.summary import SUMMARY_PERIODS, Summary
from devjournal.services import NotFoundError, ValidationError

log = structlog.get_logger("devjournal.service")

RECENT_ACTIVITY_LIMIT = 100

_PERIOD_WINDOWS: dict[str, timedelta] = {
    "daily": timedelta(hours=24),
    "weekly": timedelta(days=7),
}


class JournalService:
    """Stateless service for journal summaries."""

    def __init__(self, summary_dao: SummaryDAO, activity_dao: ActivityDAO) -> None:
        self._summary_dao = summary_dao
        self._activity_dao = activity_dao

    async def list(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        cursor: str | None = None,
        page_size: int = 20,
    ) -> dict:
        page = await self._summary_dao.list_paginated(session, user_id, cursor, page_size)
        total = await self._summary_dao.count_for_user(session, user_id)
        return {
            "data": page.data,
            "next_cursor": page.next_cursor,
            "has_more": page.has_more,
            "total": total,
        }

    async def generate(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        period: str,
        *,
        now: datetime | None = None,
    ) -> Summary:
        """Summarize the user's recent activity for *period* and store it.

        Only the most recent activities are considered. Nothing is stored
        when the period window is empty.
        """
        if period not in SUMMARY_PERIODS:
            raise ValidationError(f"invalid summary period: {period!r}")

        recent = await self._activity_dao.list_recent(session, user_id, RECENT_ACTIVITY_LIMIT)
        if not recent:
            raise ValidationError("no activities found, sync your GitHub data first")

        now = now or datetime.now(timezone.utc)
        since = now - _PERIOD_WINDOWS[period]
        in_window = [a for a in recent if (a.occurred_at or a.created_at) >= since]
        if not in_window:
            raise ValidationError(f"no activities found for {period} period")

        summary = await self._summary_dao.create(
            session,
            user_id=user_id,
            period=period,
            content=render_summary(in_window, period),
            ai_generated=True,
            published=False,
        )
        log.info(
            "journal.generated",
            user_id=str(user_id),
            period=period,
            activities=len(in_window),
        )
        return summary

    async def publish(
        self, session: AsyncSession, user_id: uuid.UUID, summary_id: uuid.UUID
    ) -> Summary:
        """Mark a summary as published. Publishing twice is a no-op."""
        summary = await self._summary_dao.publish(session, user_id, summary_id)
        if summary is None:
            raise NotFoundError("summary not found")
        return summary
