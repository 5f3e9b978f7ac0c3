"""Activity normalizer — upstream GitHub shapes → :class:`NormalizedActivity`.

Two inputs are understood:

* events from the REST activity feeds (``/users/{login}/events`` and
  ``/repos/{owner}/{repo}/events``), parsed first into a closed set of
  variants so that every upstream type is either mapped or explicitly
  :class:`UnhandledEvent`;
* webhook deliveries, keyed by the ``X-GitHub-Event`` header value.

Everything here is pure: no I/O, no clock, no database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from devjournal.engines.activity_ingest.models import NormalizedActivity

GITHUB_WEB_URL = "https://github.com"
GITHUB_API_URL = "https://api.github.com"

_FEED_COMMENT_LIMIT = 100
_WEBHOOK_COMMENT_LIMIT = 200
_BRANCH_REF_PREFIX = "refs/heads/"


# ── feed event variants ───────────────────────────────────────────────────


@dataclass(frozen=True)
class EventMeta:
    """Fields shared by every feed event."""

    event_id: str | None
    repository: str | None
    occurred_at: datetime | None
    api_url: str | None


@dataclass(frozen=True)
class PushEvent:
    meta: EventMeta
    messages: list[str]
    head: str | None
    ref: str | None


@dataclass(frozen=True)
class PullRequestEvent:
    meta: EventMeta
    action: str | None
    title: str | None


@dataclass(frozen=True)
class IssuesEvent:
    meta: EventMeta
    action: str | None
    title: str | None


@dataclass(frozen=True)
class WatchEvent:
    meta: EventMeta


@dataclass(frozen=True)
class IssueCommentEvent:
    meta: EventMeta
    body: str | None
    html_url: str | None


@dataclass(frozen=True)
class UnhandledEvent:
    meta: EventMeta
    type: str


FeedEvent = Union[
    PushEvent, PullRequestEvent, IssuesEvent, WatchEvent, IssueCommentEvent, UnhandledEvent
]


def parse_feed_event(raw: dict[str, Any]) -> FeedEvent:
    """Parse one raw feed event into its variant."""
    payload = raw.get("payload") or {}
    event_id = raw.get("id")
    meta = EventMeta(
        event_id=str(event_id) if event_id is not None else None,
        repository=(raw.get("repo") or {}).get("name"),
        occurred_at=_parse_datetime(raw.get("created_at")),
        api_url=raw.get("url"),
    )
    event_type = raw.get("type") or ""

    if event_type == "PushEvent":
        commits = payload.get("commits") or []
        return PushEvent(
            meta=meta,
            messages=[c.get("message", "") for c in commits],
            head=payload.get("head"),
            ref=payload.get("ref"),
        )
    if event_type == "PullRequestEvent":
        pr = payload.get("pull_request") or {}
        return PullRequestEvent(
            meta=meta,
            action=payload.get("action"),
            title=pr.get("title"),
        )
    if event_type == "IssuesEvent":
        issue = payload.get("issue") or {}
        return IssuesEvent(
            meta=meta,
            action=payload.get("action"),
            title=issue.get("title"),
        )
    if event_type == "WatchEvent":
        return WatchEvent(meta=meta)
    if event_type == "IssueCommentEvent":
        comment = payload.get("comment") or {}
        return IssueCommentEvent(
            meta=meta,
            body=comment.get("body"),
            html_url=comment.get("html_url"),
        )
    return UnhandledEvent(meta=meta, type=event_type)


def normalize_feed_event(
    event: FeedEvent | dict[str, Any], repository: str | None = None
) -> NormalizedActivity | None:
    """Map one feed event to zero or one activity.

    *repository* is the owning repository context; when omitted the event's
    own ``repo.name`` is used. Returns None for :class:`UnhandledEvent`.
    """
    if isinstance(event, dict):
        event = parse_feed_event(event)

    meta = event.meta
    repo = repository or meta.repository or "unknown"

    if isinstance(event, PushEvent):
        return NormalizedActivity(
            kind="commit",
            repository=repo,
            title=f"Pushed {len(event.messages)} commits",
            description=", ".join(event.messages),
            url=(
                f"{GITHUB_WEB_URL}/{repo}/commit/{event.head}"
                if event.head
                else _event_url(meta, repo)
            ),
            sha=event.head,
            branch=_branch_from_ref(event.ref),
            occurred_at=meta.occurred_at,
        )
    if isinstance(event, PullRequestEvent):
        return NormalizedActivity(
            kind="pull_request",
            repository=repo,
            title="Opened PR" if event.action == "opened" else "Updated PR",
            description=event.title,
            url=_event_url(meta, repo),
            occurred_at=meta.occurred_at,
        )
    if isinstance(event, IssuesEvent):
        return NormalizedActivity(
            kind="issue",
            repository=repo,
            title="Opened issue" if event.action == "opened" else "Updated issue",
            description=event.title,
            url=_event_url(meta, repo),
            occurred_at=meta.occurred_at,
        )
    if isinstance(event, WatchEvent):
        return NormalizedActivity(
            kind="star",
            repository=repo,
            title="Starred repository",
            description=repo,
            url=f"{GITHUB_WEB_URL}/{repo}",
            occurred_at=meta.occurred_at,
        )
    if isinstance(event, IssueCommentEvent):
        return NormalizedActivity(
            kind="comment",
            repository=repo,
            title="Commented on issue",
            description=_truncate(event.body, _FEED_COMMENT_LIMIT),
            url=event.html_url or _event_url(meta, repo),
            occurred_at=meta.occurred_at,
        )
    if isinstance(event, UnhandledEvent):
        return None
    raise TypeError(f"unknown feed event variant: {type(event).__name__}")


def normalize_feed(
    events: list[dict[str, Any]], repository: str | None = None
) -> tuple[list[NormalizedActivity], list[str]]:
    """Normalize a whole feed page.

    Returns ``(activities, unhandled_types)``.
    """
    activities: list[NormalizedActivity] = []
    unhandled: list[str] = []
    for raw in events:
        event = parse_feed_event(raw)
        if isinstance(event, UnhandledEvent):
            unhandled.append(event.type)
            continue
        activity = normalize_feed_event(event, repository)
        if activity is not None:
            activities.append(activity)
    return activities, unhandled


# ── webhook deliveries ────────────────────────────────────────────────────


@dataclass
class NormalizedDelivery:
    """Activities derived from one webhook delivery.

    ``handled`` is False for event types nothing is recorded for, including
    tag creation.
    """

    event_type: str
    repository: str | None
    handled: bool = True
    activities: list[NormalizedActivity] = field(default_factory=list)


WEBHOOK_EVENT_TYPES = ("push", "pull_request", "issues", "issue_comment", "create")


def normalize_webhook(event_type: str, payload: dict[str, Any]) -> NormalizedDelivery:
    """Map a webhook delivery to the activities it represents."""
    repository_info = payload.get("repository") or {}
    repository = repository_info.get("full_name")
    delivery = NormalizedDelivery(event_type=event_type, repository=repository)

    if repository is None or event_type not in WEBHOOK_EVENT_TYPES:
        delivery.handled = False
        return delivery

    action = payload.get("action") or ""

    if event_type == "push":
        branch = _branch_from_ref(payload.get("ref"))
        for commit in payload.get("commits") or []:
            message = commit.get("message") or ""
            first_line = message.split("\n", 1)[0]
            delivery.activities.append(
                NormalizedActivity(
                    kind="commit",
                    repository=repository,
                    title=f"Pushed commit: {first_line}",
                    description=message,
                    url=commit.get("url")
                    or f"{GITHUB_WEB_URL}/{repository}/commit/{commit.get('id')}",
                    sha=commit.get("id"),
                    branch=branch,
                    occurred_at=_parse_datetime(commit.get("timestamp")),
                )
            )
    elif event_type == "pull_request":
        pr = payload.get("pull_request") or {}
        delivery.activities.append(
            NormalizedActivity(
                kind="pull_request",
                repository=repository,
                title=f"{_capitalize(action)} pull request",
                description=pr.get("title"),
                url=pr.get("html_url") or f"{GITHUB_WEB_URL}/{repository}/pull/{pr.get('number')}",
                branch=(pr.get("head") or {}).get("ref"),
                occurred_at=_parse_datetime(pr.get("updated_at")),
            )
        )
    elif event_type == "issues":
        issue = payload.get("issue") or {}
        delivery.activities.append(
            NormalizedActivity(
                kind="issue",
                repository=repository,
                title=f"{_capitalize(action)} issue",
                description=issue.get("title"),
                url=issue.get("html_url")
                or f"{GITHUB_WEB_URL}/{repository}/issues/{issue.get('number')}",
                occurred_at=_parse_datetime(issue.get("updated_at")),
            )
        )
    elif event_type == "issue_comment":
        comment = payload.get("comment") or {}
        delivery.activities.append(
            NormalizedActivity(
                kind="comment",
                repository=repository,
                title=f"{_capitalize(action)} comment on issue",
                description=_truncate(comment.get("body"), _WEBHOOK_COMMENT_LIMIT),
                url=comment.get("html_url")
                or f"{GITHUB_WEB_URL}/{repository}#comment-{comment.get('id')}",
                occurred_at=_parse_datetime(comment.get("created_at")),
            )
        )
    elif event_type == "create":
        if payload.get("ref_type") != "branch":
            delivery.handled = False
            return delivery
        ref = payload.get("ref") or ""
        html_url = repository_info.get("html_url") or f"{GITHUB_WEB_URL}/{repository}"
        delivery.activities.append(
            NormalizedActivity(
                kind="commit",
                repository=repository,
                title=f"Created branch: {ref}",
                description=f"New branch created: {ref}",
                url=f"{html_url}/tree/{ref}",
                branch=ref,
            )
        )

    return delivery


# ── helpers ───────────────────────────────────────────────────────────────


def _event_url(meta: EventMeta, repository: str) -> str:
    # PR and issue pages are shared by every event on them, the event URL is not.
    if meta.api_url:
        return meta.api_url
    if meta.event_id:
        return f"{GITHUB_API_URL}/events/{meta.event_id}"
    return f"{GITHUB_WEB_URL}/{repository}"


def _branch_from_ref(ref: str | None) -> str | None:
    if not ref:
        return None
    if ref.startswith(_BRANCH_REF_PREFIX):
        return ref[len(_BRANCH_REF_PREFIX) :]
    return None


def _capitalize(action: str) -> str:
    """Upper-case the first letter only (``"opened"`` → ``"Opened"``)."""
    return action[:1].upper() + action[1:]


def _truncate(text: str | None, limit: int) -> str | None:
    if text is None:
        return None
    return text[:limit]


def _parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO-8601 datetime string, returning None on failure."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
