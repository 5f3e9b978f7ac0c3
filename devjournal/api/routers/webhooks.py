"""Webhooks router — inbound GitHub deliveries."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.api.deps import get_session, get_webhook_receiver
from devjournal.api.schemas.webhook import WebhookResponse
from devjournal.engines.activity_ingest.webhook import WebhookReceiver

router = APIRouter()


async def _verified_body(
    request: Request,
    receiver: WebhookReceiver = Depends(get_webhook_receiver),
) -> bytes:
    # resolved before get_session so a bad signature never touches the store
    body = await request.body()
    receiver.verify(body, request.headers)
    return body


@router.post("/github", response_model=WebhookResponse)
async def github_webhook(
    request: Request,
    body: bytes = Depends(_verified_body),
    session: AsyncSession = Depends(get_session),
    receiver: WebhookReceiver = Depends(get_webhook_receiver),
) -> WebhookResponse:
    result = await receiver.process(session, body, request.headers)
    return WebhookResponse(handled=result.handled, inserted=result.inserted)
