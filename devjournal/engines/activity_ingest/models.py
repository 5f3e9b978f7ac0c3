"""Data models for the activity ingestion engine."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Literal

ActivityKind = Literal["commit", "pull_request", "issue", "star", "comment"]


@dataclass
class NormalizedActivity:
    """One canonical activity record, independent of its upstream shape.

    Pure data, no DB dependencies.
    """

    kind: ActivityKind
    repository: str
    title: str
    url: str  # dedupe key per user
    description: str | None = None
    sha: str | None = None
    branch: str | None = None
    occurred_at: datetime | None = None

    def to_row(self, user_id: uuid.UUID) -> dict[str, Any]:
        row = asdict(self)
        row["user_id"] = user_id
        return row


@dataclass
class SyncResult:
    """Summary of a single sync run for one user."""

    user_id: uuid.UUID
    mode: Literal["all", "tracked"] = "all"
    fetched: int = 0
    normalized: int = 0
    inserted: int = 0
    by_kind: dict[str, int] = field(default_factory=dict)
    repositories: dict[str, str] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)


@dataclass
class WebhookResult:
    """Outcome of one webhook delivery."""

    event_type: str
    repository: str | None = None
    handled: bool = False
    trackers: int = 0
    inserted: int = 0
    errors: list[str] = field(default_factory=list)
