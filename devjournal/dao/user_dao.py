"""UserDAO — users table operations."""

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.dao.base import BaseDAO
from devjournal.models.user import User


class UserDAO(BaseDAO[User]):
    model = User

    async def get_by_login(self, session: AsyncSession, login: str) -> User | None:
        return await self.get_by_field(session, login=login)

    async def upsert_identity(
        self,
        session: AsyncSession,
        *,
        github_id: int,
        login: str,
        github_access_token: str,
        email: str | None = None,
        name: str | None = None,
        avatar_url: str | None = None,
    ) -> User:
        """Insert a user keyed by ``github_id`` or refresh the stored identity.

        Called from the identity-provider callback every time a new
        access token is minted.
        """
        values = {
            "github_id": github_id,
            "login": login,
            "github_access_token": github_access_token,
            "email": email,
            "name": name,
            "avatar_url": avatar_url,
        }
        stmt = (
            insert(User)
            .values(**values)
            .on_conflict_do_update(
                index_elements=["github_id"],
                set_={
                    **{k: v for k, v in values.items() if k != "github_id"},
                    "updated_at": func.now(),
                },
            )
            .returning(User)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().one()
