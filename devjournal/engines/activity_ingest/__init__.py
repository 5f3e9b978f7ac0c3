"""Activity ingestion engine — GitHub feeds and webhooks into activity records."""

from devjournal.engines.activity_ingest.github_client import GitHubClient
from devjournal.engines.activity_ingest.models import (
    ActivityKind,
    NormalizedActivity,
    SyncResult,
    WebhookResult,
)
from devjournal.engines.activity_ingest.normalizer import (
    normalize_feed,
    normalize_feed_event,
    normalize_webhook,
    parse_feed_event,
)

__all__ = [
    "ActivityKind",
    "GitHubClient",
    "NormalizedActivity",
    "SyncResult",
    "WebhookResult",
    "normalize_feed",
    "normalize_feed_event",
    "normalize_webhook",
    "parse_feed_event",
]
