"""IntegrationDAO — integrations table operations."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.dao.base import BaseDAO
from devjournal.models.integration import Integration


class IntegrationDAO(BaseDAO[Integration]):
    model = Integration

    async def list_for_user(
        self, session: AsyncSession, user_id: uuid.UUID
    ) -> list[Integration]:
        stmt = (
            select(Integration)
            .where(Integration.user_id == user_id)
            .order_by(Integration.provider)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
