"""Tests for the journal template and JournalService (mock DAOs)."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from devjournal.engines.journal.template import render_summary
from devjournal.services import NotFoundError, ValidationError
from devjournal.services.journal_service import RECENT_ACTIVITY_LIMIT, JournalService

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
USER_ID = uuid.uuid4()


def _act(
    kind: str = "commit",
    repository: str = "octo/a",
    *,
    age: timedelta = timedelta(0),
    occurred: bool = True,
):
    when = NOW - age
    return SimpleNamespace(
        kind=kind,
        repository=repository,
        occurred_at=when if occurred else None,
        created_at=when,
    )


# ── TestRenderSummary ─────────────────────────────────────────────────────


class TestRenderSummary:
    def test_heading_and_counts(self):
        text = render_summary(
            [_act("commit"), _act("commit"), _act("pull_request"), _act("star")], "daily"
        )
        assert text.startswith("## GitHub Activity Summary - Daily")
        assert "**Commits:** 2 commits" in text
        assert "**Pull Requests:** 1 PR" in text
        assert "**Stars:** 1 repository starred" in text
        assert "Issues" not in text
        assert "**Total activities:** 4" in text

    def test_weekly_heading(self):
        assert render_summary([_act()], "weekly").startswith("## GitHub Activity Summary - Weekly")

    def test_repository_list_capped_at_five(self):
        acts = [_act(repository=f"octo/r{i}") for i in range(7)]
        text = render_summary(acts, "weekly")
        assert "**Repositories worked on:** 7" in text
        assert "- octo/r4" in text
        assert "- octo/r5" not in text
        assert "- ... and 2 more" in text

    def test_repositories_listed_once_in_first_seen_order(self):
        acts = [_act(repository="b/b"), _act(repository="a/a"), _act(repository="b/b")]
        text = render_summary(acts, "daily")
        assert text.index("- b/b") < text.index("- a/a")
        assert text.count("- b/b") == 1


# ── TestJournalService ────────────────────────────────────────────────────


def _make_service(recent=None):
    summary_dao = AsyncMock()
    summary_dao.create.side_effect = lambda session, **values: SimpleNamespace(**values)
    activity_dao = AsyncMock()
    activity_dao.list_recent.return_value = recent if recent is not None else []
    return JournalService(summary_dao, activity_dao), summary_dao, activity_dao


class TestGenerate:
    async def test_daily_uses_last_24_hours(self):
        recent = [
            _act("commit", age=timedelta(hours=1)),
            _act("issue", age=timedelta(hours=23)),
            _act("commit", age=timedelta(days=3)),
        ]
        svc, summary_dao, activity_dao = _make_service(recent)

        summary = await svc.generate(AsyncMock(), USER_ID, "daily", now=NOW)

        activity_dao.list_recent.assert_awaited_once()
        assert activity_dao.list_recent.call_args.args[2] == RECENT_ACTIVITY_LIMIT
        assert summary.period == "daily"
        assert summary.ai_generated is True
        assert summary.published is False
        assert "**Total activities:** 2" in summary.content
        summary_dao.create.assert_awaited_once()

    async def test_weekly_window(self):
        recent = [_act(age=timedelta(days=6)), _act(age=timedelta(days=8))]
        svc, _, _ = _make_service(recent)
        summary = await svc.generate(AsyncMock(), USER_ID, "weekly", now=NOW)
        assert "**Total activities:** 1" in summary.content

    async def test_falls_back_to_ingest_time(self):
        svc, _, _ = _make_service([_act(age=timedelta(hours=2), occurred=False)])
        summary = await svc.generate(AsyncMock(), USER_ID, "daily", now=NOW)
        assert "**Total activities:** 1" in summary.content

    async def test_empty_window_creates_nothing(self):
        svc, summary_dao, _ = _make_service([_act(age=timedelta(days=3))])
        with pytest.raises(ValidationError, match="no activities found for daily period"):
            await svc.generate(AsyncMock(), USER_ID, "daily", now=NOW)
        summary_dao.create.assert_not_called()

    async def test_no_history(self):
        svc, summary_dao, _ = _make_service([])
        with pytest.raises(ValidationError, match="sync your GitHub data first"):
            await svc.generate(AsyncMock(), USER_ID, "weekly", now=NOW)
        summary_dao.create.assert_not_called()

    async def test_invalid_period(self):
        svc, _, activity_dao = _make_service([_act()])
        with pytest.raises(ValidationError):
            await svc.generate(AsyncMock(), USER_ID, "monthly", now=NOW)
        activity_dao.list_recent.assert_not_called()


class TestPublish:
    async def test_publish(self):
        svc, summary_dao, _ = _make_service()
        published = SimpleNamespace(published=True, published_at=NOW)
        summary_dao.publish.return_value = published
        sid = uuid.uuid4()

        assert await svc.publish(AsyncMock(), USER_ID, sid) is published
        summary_dao.publish.assert_awaited_once()
        assert summary_dao.publish.call_args.args[1:] == (USER_ID, sid)

    async def test_not_found_or_not_owned(self):
        svc, summary_dao, _ = _make_service()
        summary_dao.publish.return_value = None
        with pytest.raises(NotFoundError):
            await svc.publish(AsyncMock(), USER_ID, uuid.uuid4())
