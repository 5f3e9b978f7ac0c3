"""GitHub sync schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class SyncResponse(BaseModel):
    success: bool = True
    message: str
    activities_count: int
    fetched: int
    by_kind: dict[str, int]
    repositories: dict[str, str]
    errors: list[str]


class OverviewResponse(BaseModel):
    user: dict[str, Any]
    repositories: list[dict[str, Any]]
