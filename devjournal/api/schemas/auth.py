"""Auth request/response schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class IdentityRequest(BaseModel):
    """Identity minted by the external provider after OAuth."""

    github_id: int
    login: str
    access_token: str
    email: str | None = None
    name: str | None = None
    avatar_url: str | None = None


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    github_id: int
    login: str
    email: str | None
    name: str | None
    avatar_url: str | None
    is_public: bool
    created_at: datetime
