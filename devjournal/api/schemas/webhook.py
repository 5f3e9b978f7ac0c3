"""Webhook response schema."""

from __future__ import annotations

from pydantic import BaseModel


class WebhookResponse(BaseModel):
    success: bool = True
    handled: bool
    inserted: int
