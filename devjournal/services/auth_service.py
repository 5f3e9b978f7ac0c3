"""AuthService — JWT access tokens and the identity-provider callback."""

import hmac
import os
import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.dao.user_dao import UserDAO
from devjournal.models.user import User
from devjournal.services import AuthenticationError

# ---------------------------------------------------------------------------
# JWT configuration
# ---------------------------------------------------------------------------

_ALGORITHM = "HS256"
_ACCESS_TOKEN_EXPIRE = timedelta(days=7)

# Environment variable keys
_ENV_JWT_SECRET = "DEVJOURNAL_JWT_SECRET"
_ENV_IDENTITY_SECRET = "DEVJOURNAL_IDENTITY_SECRET"


def _get_secret(name: str) -> str:
    """Read a secret from the environment. Raises if not set."""
    secret = os.environ.get(name)
    if not secret:
        raise RuntimeError(f"{name} environment variable is required")
    return secret


class AccessToken:
    """Access token returned to the identity provider."""

    __slots__ = ("access_token", "token_type", "user")

    def __init__(self, access_token: str, user: User) -> None:
        self.access_token = access_token
        self.token_type = "bearer"
        self.user = user


# ---------------------------------------------------------------------------
# AuthService
# ---------------------------------------------------------------------------


class AuthService:
    """Stateless authentication service.

    OAuth itself happens outside; this service trusts the provider callback
    (guarded by a shared secret) and mints its own access tokens.
    """

    def __init__(self, user_dao: UserDAO) -> None:
        self._user_dao = user_dao

    # -- Identity callback -------------------------------------------------

    @staticmethod
    def verify_identity_secret(provided: str | None) -> None:
        """Raise :class:`AuthenticationError` unless *provided* matches the shared secret."""
        expected = _get_secret(_ENV_IDENTITY_SECRET)
        if not provided or not hmac.compare_digest(provided, expected):
            raise AuthenticationError("invalid identity secret")

    async def register_identity(
        self,
        session: AsyncSession,
        *,
        github_id: int,
        login: str,
        github_access_token: str,
        email: str | None = None,
        name: str | None = None,
        avatar_url: str | None = None,
    ) -> AccessToken:
        """Upsert the user by ``github_id`` and issue an access token."""
        user = await self._user_dao.upsert_identity(
            session,
            github_id=github_id,
            login=login,
            github_access_token=github_access_token,
            email=email,
            name=name,
            avatar_url=avatar_url,
        )
        return AccessToken(self.issue_access_token(user.id), user)

    # -- Token -------------------------------------------------------------

    @staticmethod
    def issue_access_token(user_id: uuid.UUID) -> str:
        now = datetime.now(timezone.utc)
        return jwt.encode(
            {
                "sub": str(user_id),
                "type": "access",
                "exp": now + _ACCESS_TOKEN_EXPIRE,
            },
            _get_secret(_ENV_JWT_SECRET),
            algorithm=_ALGORITHM,
        )

    async def get_current_user(self, session: AsyncSession, token: str) -> User:
        """Decode an access token and return the corresponding user.

        Intended for use as a FastAPI dependency.

        Raises :class:`AuthenticationError` on invalid token or unknown user.
        """
        secret = _get_secret(_ENV_JWT_SECRET)
        try:
            payload = jwt.decode(token, secret, algorithms=[_ALGORITHM])
        except JWTError:
            raise AuthenticationError("invalid access token")

        if payload.get("type") != "access":
            raise AuthenticationError("invalid token type")

        try:
            user_id = uuid.UUID(payload["sub"])
        except (KeyError, ValueError):
            raise AuthenticationError("invalid token payload")

        user = await self._user_dao.get_by_id(session, user_id)
        if user is None:
            raise AuthenticationError("user not found")

        return user
