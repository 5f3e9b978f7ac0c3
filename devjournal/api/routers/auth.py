"""Auth router — identity-provider callback, me."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.api.deps import get_auth_service, get_current_user, get_session
from devjournal.api.schemas.auth import AccessTokenResponse, IdentityRequest, UserResponse
from devjournal.models.user import User
from devjournal.services.auth_service import AuthService

router = APIRouter()


def _verified_identity_caller(
    x_identity_secret: str | None = Header(None),
    auth: AuthService = Depends(get_auth_service),
) -> None:
    auth.verify_identity_secret(x_identity_secret)


@router.post(
    "/github",
    response_model=AccessTokenResponse,
    dependencies=[Depends(_verified_identity_caller)],
)
async def github_identity(
    body: IdentityRequest,
    session: AsyncSession = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
) -> AccessTokenResponse:
    token = await auth.register_identity(
        session,
        github_id=body.github_id,
        login=body.login,
        github_access_token=body.access_token,
        email=body.email,
        name=body.name,
        avatar_url=body.avatar_url,
    )
    return AccessTokenResponse(access_token=token.access_token, token_type=token.token_type)


@router.get("/me", response_model=UserResponse)
async def me(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    return UserResponse.model_validate(current_user)
