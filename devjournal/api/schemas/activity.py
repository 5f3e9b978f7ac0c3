"""Activity response schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ActivityItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    kind: str
    repository: str
    title: str
    description: str | None
    url: str
    sha: str | None
    branch: str | None
    occurred_at: datetime | None
    created_at: datetime
