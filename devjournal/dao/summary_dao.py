"""SummaryDAO — summaries table operations."""

import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.dao.base import BaseDAO, Page
from devjournal.models.summary import Summary


class SummaryDAO(BaseDAO[Summary]):
    model = Summary

    async def list_paginated(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        cursor: str | None = None,
        page_size: int = 20,
    ) -> Page[Summary]:
        query = select(Summary).where(Summary.user_id == user_id)
        return await self.paginate(session, query, cursor, page_size)

    async def count_for_user(self, session: AsyncSession, user_id: uuid.UUID) -> int:
        return await self.count(session, select(Summary).where(Summary.user_id == user_id))

    async def get_owned(
        self, session: AsyncSession, user_id: uuid.UUID, summary_id: uuid.UUID
    ) -> Summary | None:
        self._require_pk(summary_id)
        stmt = select(Summary).where(Summary.id == summary_id, Summary.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def publish(
        self, session: AsyncSession, user_id: uuid.UUID, summary_id: uuid.UUID
    ) -> Summary | None:
        """Flip ``published`` and stamp ``published_at`` in one UPDATE.

        Already-published rows are left untouched and returned as-is.
        Returns None when the summary does not exist or belongs to someone else.
        """
        self._require_pk(summary_id)
        stmt = (
            update(Summary)
            .where(
                Summary.id == summary_id,
                Summary.user_id == user_id,
                Summary.published.is_(False),
            )
            .values(published=True, published_at=func.now())
            .returning(Summary)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        row = result.scalars().first()
        if row is not None:
            return row
        return await self.get_owned(session, user_id, summary_id)
