"""WebhookReceiver — verify, normalize and fan a GitHub delivery out to trackers."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.core.github import verify_signature
from devjournal.engines.activity_ingest.models import WebhookResult
from devjournal.engines.activity_ingest.normalizer import normalize_webhook
from devjournal.services import (
    STORE_CONNECTION_ERRORS,
    SignatureInvalidError,
    StoreUnavailableError,
    ValidationError,
)
from devjournal.services.activity_service import ActivityService
from devjournal.services.settings_service import SettingsService

log = structlog.get_logger("devjournal.engine")

EVENT_HEADER = "x-github-event"
SIGNATURE_HEADER = "x-hub-signature-256"
DELIVERY_HEADER = "x-github-delivery"

_ENV_WEBHOOK_SECRET = "DEVJOURNAL_WEBHOOK_SECRET"


class WebhookReceiver:
    """Inbound entry point of the ingestion pipeline."""

    def __init__(
        self,
        settings_service: SettingsService,
        activity_service: ActivityService,
        secret: str | None = None,
    ) -> None:
        self._settings_service = settings_service
        self._activity_service = activity_service
        self._secret = secret

    @property
    def secret(self) -> str | None:
        return self._secret if self._secret is not None else os.environ.get(_ENV_WEBHOOK_SECRET)

    def verify(self, raw_body: bytes, headers: Mapping[str, str]) -> None:
        """Raise :class:`SignatureInvalidError` unless the delivery is signed correctly.

        No-op when no secret is configured.
        """
        secret = self.secret
        if not secret:
            return
        if not verify_signature(secret, raw_body, _header(headers, SIGNATURE_HEADER)):
            raise SignatureInvalidError("invalid signature")

    async def handle(
        self,
        session: AsyncSession,
        raw_body: bytes,
        headers: Mapping[str, str],
    ) -> WebhookResult:
        """Verify and process one delivery."""
        self.verify(raw_body, headers)
        return await self.process(session, raw_body, headers)

    async def process(
        self,
        session: AsyncSession,
        raw_body: bytes,
        headers: Mapping[str, str],
    ) -> WebhookResult:
        """Process a delivery whose signature has already been checked.

        Each tracking user is written inside its own SAVEPOINT so that a
        failure for one user does not discard the records of the others.
        """
        try:
            payload = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ValidationError("webhook body is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise ValidationError("webhook body must be a JSON object")

        event_type = _header(headers, EVENT_HEADER) or ""
        delivery = normalize_webhook(event_type, payload)
        result = WebhookResult(event_type=event_type, repository=delivery.repository)

        if not delivery.handled:
            log.info(
                "webhook.unhandled_event",
                event_type=event_type,
                repository=delivery.repository,
                delivery=_header(headers, DELIVERY_HEADER),
            )
            return result

        result.handled = True
        if not delivery.activities:
            return result

        user_ids = await self._settings_service.list_users_tracking(session, delivery.repository)
        result.trackers = len(user_ids)

        for user_id in user_ids:
            try:
                async with session.begin_nested():
                    result.inserted += await self._activity_service.store_activities(
                        session, user_id, delivery.activities
                    )
            except StoreUnavailableError:
                raise
            except STORE_CONNECTION_ERRORS as exc:
                raise StoreUnavailableError("database connection not available") from exc
            except Exception as exc:
                log.exception(
                    "webhook.user_failed",
                    event_type=event_type,
                    repository=delivery.repository,
                    user_id=str(user_id),
                )
                result.errors.append(f"{user_id}: {exc}")

        log.info(
            "webhook.processed",
            event_type=event_type,
            repository=delivery.repository,
            trackers=result.trackers,
            inserted=result.inserted,
        )
        return result


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        # plain dicts are case-sensitive, Starlette headers are not
        for key, val in headers.items():
            if key.lower() == name:
                return val
    return value
