"""Analytics dashboard schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class HeatmapDay(BaseModel):
    date: date
    count: int


class RepositoryStat(BaseModel):
    name: str
    activities: int
    commits: int


class WeeklyTrend(BaseModel):
    week: date
    commits: int
    prs: int
    issues: int


class Achievement(BaseModel):
    name: str
    description: str
    earned_at: datetime | None = None


class Recommendation(BaseModel):
    type: str
    title: str
    description: str
    priority: str


class DashboardResponse(BaseModel):
    range: str
    productivity_score: int
    streak_days: int
    total_contributions: int
    activity_heatmap: list[HeatmapDay]
    repository_stats: list[RepositoryStat]
    weekly_trends: list[WeeklyTrend]
    achievements: list[Achievement]
    recommendations: list[Recommendation]
