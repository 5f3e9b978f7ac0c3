"""Settings request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TrackingRequest(BaseModel):
    repository: str
    is_tracked: bool


class TrackingResponse(BaseModel):
    success: bool = True
    tracked_repositories: list[str]


class RepositoryItem(BaseModel):
    """Upstream repository fields plus the tracking flag; extra keys pass through."""

    model_config = ConfigDict(extra="allow")

    full_name: str
    name: str | None = None
    description: str | None = None
    html_url: str | None = None
    private: bool | None = None
    is_tracked: bool


class PreferencesUpdate(BaseModel):
    """Full replacement; the service reports the first missing field."""

    auto_post_to_twitter: bool | None = None
    auto_post_to_linkedin: bool | None = None
    auto_post_to_notion: bool | None = None
    summary_frequency: str | None = None
    email_digest_enabled: bool | None = None
    email_digest_frequency: str | None = None
    ai_prompt_style: str | None = None
    is_public: bool | None = None


class PreferencesResponse(BaseModel):
    auto_post_to_twitter: bool
    auto_post_to_linkedin: bool
    auto_post_to_notion: bool
    summary_frequency: str
    email_digest_enabled: bool
    email_digest_frequency: str
    ai_prompt_style: str
    is_public: bool
    tracked_repositories: list[str] = Field(default_factory=list)


class IntegrationItem(BaseModel):
    id: str
    provider: str
    name: str
    is_connected: bool
    last_sync: datetime | None = None
