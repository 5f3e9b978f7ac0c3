"""AnalyticsService — dashboard metrics computed from stored activity."""

from __future__ import annotations

import math
import uuid
from collections import Counter
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from devjournal.dao.activity_dao import ActivityDAO
from devjournal.models.activity import Activity
from devjournal.services import ValidationError

RANGES: dict[str, timedelta] = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}

_HEATMAP_DAYS = 30
_TREND_WEEKS = 4
_TOP_REPOSITORIES = 5
_LOW_PRODUCTIVITY = 60


def _when(activity: Activity) -> datetime:
    return activity.occurred_at or activity.created_at


def _day(activity: Activity) -> date:
    return _when(activity).astimezone(timezone.utc).date()


def productivity_score(activities: list[Activity]) -> int:
    """Weighted share of commits, PRs and issues, scaled to 0..100."""
    if not activities:
        return 0
    kinds = Counter(a.kind for a in activities)
    weighted = 2 * kinds["commit"] + 3 * kinds["pull_request"] + 2 * kinds["issue"]
    # half-up rounding
    return min(math.floor(weighted / len(activities) * 10 + 0.5), 100)


def streak_days(activities: list[Activity], today: date) -> int:
    """Consecutive days with activity, counting back from *today*."""
    days = {_day(a) for a in activities}
    streak = 0
    current = today
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def activity_heatmap(activities: list[Activity], today: date) -> list[dict]:
    per_day = Counter(_day(a) for a in activities)
    return [
        {"date": d.isoformat(), "count": per_day.get(d, 0)}
        for d in (today - timedelta(days=i) for i in range(_HEATMAP_DAYS - 1, -1, -1))
    ]


def weekly_trends(activities: list[Activity], now: datetime) -> list[dict]:
    """Four 7-day buckets, oldest first, the newest one ending at *now*."""
    trends = []
    for i in range(_TREND_WEEKS - 1, -1, -1):
        end = now - timedelta(days=7 * i)
        start = end - timedelta(days=7)
        kinds = Counter(a.kind for a in activities if start < _when(a) <= end)
        trends.append(
            {
                "week": start.date().isoformat(),
                "commits": kinds["commit"],
                "prs": kinds["pull_request"],
                "issues": kinds["issue"],
            }
        )
    return trends


def repository_stats(activities: list[Activity]) -> list[dict]:
    totals = Counter(a.repository for a in activities)
    commits = Counter(a.repository for a in activities if a.kind == "commit")
    return [
        {"name": name, "activities": n, "commits": commits.get(name, 0)}
        for name, n in totals.most_common(_TOP_REPOSITORIES)
    ]


def achievements(activities: list[Activity]) -> list[dict]:
    """Milestones over the whole history. *activities* is newest first."""
    if not activities:
        return []
    kinds = Counter(a.kind for a in activities)
    earned: list[dict] = []
    if len(activities) >= 100:
        earned.append({"name": "Century Club", "description": "Completed 100+ activities"})
    if kinds["commit"] >= 50:
        earned.append({"name": "Code Master", "description": "Made 50+ commits"})
    if kinds["pull_request"] >= 10:
        earned.append({"name": "Collaborator", "description": "Created 10+ pull requests"})
    earned.append(
        {
            "name": "First Steps",
            "description": "Started your GitHub journey",
            "earned_at": _when(activities[-1]),
        }
    )
    return earned


def recommendations(activities: list[Activity], score: int) -> list[dict]:
    kinds = Counter(a.kind for a in activities)
    recs: list[dict] = []
    if score < _LOW_PRODUCTIVITY:
        recs.append(
            {
                "type": "productivity",
                "title": "Boost Your Productivity",
                "description": "Try to make at least one commit daily.",
                "priority": "high",
            }
        )
    if kinds["commit"] and not kinds["pull_request"]:
        recs.append(
            {
                "type": "collaboration",
                "title": "Start Collaborating",
                "description": "Open pull requests to collaborate with other developers.",
                "priority": "medium",
            }
        )
    if len(activities) < 10:
        recs.append(
            {
                "type": "activity",
                "title": "Stay Active",
                "description": "Regular activity helps build your developer profile.",
                "priority": "medium",
            }
        )
    if not recs:
        recs.append(
            {
                "type": "maintenance",
                "title": "Keep Up the Great Work!",
                "description": "Consider exploring new technologies or open source.",
                "priority": "low",
            }
        )
    return recs


class AnalyticsService:
    """Stateless service for the analytics dashboard."""

    def __init__(self, activity_dao: ActivityDAO) -> None:
        self._activity_dao = activity_dao

    async def get_dashboard(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        range: str = "month",
        *,
        now: datetime | None = None,
    ) -> dict:
        if range not in RANGES:
            raise ValidationError(f"invalid range: {range!r}")

        history = await self._activity_dao.list_for_user(session, user_id)
        if not history:
            return {
                "range": range,
                "productivity_score": 0,
                "streak_days": 0,
                "total_contributions": 0,
                "activity_heatmap": [],
                "repository_stats": [],
                "weekly_trends": [],
                "achievements": [],
                "recommendations": [],
            }

        now = now or datetime.now(timezone.utc)
        today = now.date()
        since = now - RANGES[range]
        in_range = [a for a in history if _when(a) >= since]
        score = productivity_score(in_range)

        return {
            "range": range,
            "productivity_score": score,
            "streak_days": streak_days(history, today),
            "total_contributions": len(in_range),
            "activity_heatmap": activity_heatmap(in_range, today),
            "repository_stats": repository_stats(in_range),
            "weekly_trends": weekly_trends(in_range, now),
            "achievements": achievements(history),
            "recommendations": recommendations(in_range, score),
        }
