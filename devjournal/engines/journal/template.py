"""Markdown rendering for journal summaries."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import Protocol

_MAX_LISTED_REPOSITORIES = 5

_PERIOD_PHRASES: dict[str, str] = {
    "daily": "today",
    "weekly": "this week",
}

# (kind, label, singular, plural)
_KIND_LINES: list[tuple[str, str, str, str]] = [
    ("commit", "Commits", "commit", "commits"),
    ("pull_request", "Pull Requests", "PR", "PRs"),
    ("issue", "Issues", "issue", "issues"),
    ("star", "Stars", "repository starred", "repositories starred"),
    ("comment", "Comments", "comment", "comments"),
]


class ActivityLike(Protocol):
    kind: str
    repository: str


def render_summary(activities: Iterable[ActivityLike], period: str) -> str:
    """Return the markdown digest for *activities* over *period*."""
    items = list(activities)
    counts = Counter(a.kind for a in items)
    repositories = list(dict.fromkeys(a.repository for a in items))

    lines = [
        f"## GitHub Activity Summary - {period.capitalize()}",
        "",
        f"Here's what you've been up to {_PERIOD_PHRASES.get(period, period)}:",
        "",
    ]

    for kind, label, singular, plural in _KIND_LINES:
        n = counts.get(kind, 0)
        if n:
            lines.append(f"**{label}:** {n} {singular if n == 1 else plural}")

    lines += ["", f"**Repositories worked on:** {len(repositories)}"]

    if repositories:
        lines += ["", "**Active repositories:**"]
        lines += [f"- {repo}" for repo in repositories[:_MAX_LISTED_REPOSITORIES]]
        if len(repositories) > _MAX_LISTED_REPOSITORIES:
            lines.append(f"- ... and {len(repositories) - _MAX_LISTED_REPOSITORIES} more")

    lines += ["", f"**Total activities:** {len(items)}", "", "Keep up the great work!"]
    return "\n".join(lines)
