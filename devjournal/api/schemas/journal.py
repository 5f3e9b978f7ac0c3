"""Journal request/response schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class GenerateRequest(BaseModel):
    period: Literal["daily", "weekly"]


class SummaryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    period: str
    content: str
    ai_generated: bool
    published: bool
    published_at: datetime | None
    created_at: datetime
