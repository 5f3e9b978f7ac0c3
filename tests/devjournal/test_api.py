"""Tests for the API layer.

Uses httpx.AsyncClient over ASGITransport; services are mocked to isolate
the HTTP surface from the database and GitHub.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from devjournal.api import deps
from devjournal.api.middleware.rate_limit import reset_rate_limits
from devjournal.core.github import compute_signature
from devjournal.dao.base import InvalidCursorError
from devjournal.engines.activity_ingest.models import SyncResult
from devjournal.engines.activity_ingest.webhook import WebhookReceiver
from devjournal.models.activity import Activity
from devjournal.models.summary import Summary
from devjournal.models.user import User
from devjournal.services import (
    AuthenticationError,
    NotFoundError,
    SourceUnavailableError,
    ValidationError,
)
from devjournal.services.auth_service import AccessToken, AuthService

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
USER_ID = uuid.uuid4()
WEBHOOK_SECRET = "whsec-api-test"


def _user() -> User:
    return User(
        id=USER_ID,
        github_id=42,
        login="octo",
        email="octo@example.com",
        name="Octo Cat",
        avatar_url=None,
        github_access_token="gho_test",
        is_public=False,
        created_at=NOW,
        updated_at=NOW,
    )


def _activity() -> Activity:
    return Activity(
        id=uuid.uuid4(),
        user_id=USER_ID,
        kind="commit",
        repository="octo/hello",
        title="Pushed 1 commits",
        description="fix",
        url="https://github.com/octo/hello/commit/abc",
        sha="abc",
        branch="main",
        occurred_at=NOW,
        created_at=NOW,
        updated_at=NOW,
    )


def _summary(published: bool = False) -> Summary:
    return Summary(
        id=uuid.uuid4(),
        user_id=USER_ID,
        period="daily",
        content="## GitHub Activity Summary - Daily",
        ai_generated=True,
        published=published,
        published_at=NOW if published else None,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def mock_session():
    return AsyncMock()


@pytest.fixture
def app(mock_session):
    """Create the app with session and auth dependencies mocked (no real DB)."""
    from devjournal.api import create_app

    reset_rate_limits()
    application = create_app()

    async def _mock_session():
        yield mock_session

    application.dependency_overrides[deps.get_session] = _mock_session

    async def _mock_user():
        return _user()

    application.dependency_overrides[deps.get_current_user] = _mock_user
    yield application
    reset_rate_limits()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _github_factory():
    github = MagicMock()
    github.get_user_repositories = AsyncMock(
        return_value=[{"full_name": "octo/a", "name": "a"}, {"full_name": "octo/b", "name": "b"}]
    )
    github.__aenter__ = AsyncMock(return_value=github)
    github.__aexit__ = AsyncMock(return_value=False)
    return (lambda user: github), github


# ---------------------------------------------------------------------------
# Ops
# ---------------------------------------------------------------------------


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_request_id_echoed(self, client):
        rid = str(uuid.uuid4())
        resp = await client.get("/health", headers={"X-Request-ID": rid})
        assert resp.headers["X-Request-ID"] == rid


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestAuthRouter:
    async def test_identity_callback(self, app, client):
        mock_svc = MagicMock()
        mock_svc.verify_identity_secret = MagicMock(return_value=None)
        mock_svc.register_identity = AsyncMock(return_value=AccessToken("jwt-token", _user()))
        app.dependency_overrides[deps.get_auth_service] = lambda: mock_svc

        resp = await client.post(
            "/api/v1/auth/github",
            json={"github_id": 42, "login": "octo", "access_token": "gho_new"},
            headers={"X-Identity-Secret": "shared"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"access_token": "jwt-token", "token_type": "bearer"}
        mock_svc.verify_identity_secret.assert_called_once_with("shared")
        assert mock_svc.register_identity.call_args.kwargs["github_access_token"] == "gho_new"

    async def test_identity_callback_bad_secret(self, app, client):
        mock_svc = MagicMock()
        mock_svc.verify_identity_secret = MagicMock(
            side_effect=AuthenticationError("invalid identity secret")
        )
        mock_svc.register_identity = AsyncMock()
        app.dependency_overrides[deps.get_auth_service] = lambda: mock_svc

        resp = await client.post(
            "/api/v1/auth/github",
            json={"github_id": 42, "login": "octo", "access_token": "gho_new"},
        )

        assert resp.status_code == 401
        mock_svc.register_identity.assert_not_called()

    async def test_me(self, client):
        resp = await client.get("/api/v1/auth/me")
        assert resp.status_code == 200
        body = resp.json()
        assert body["login"] == "octo"
        assert "github_access_token" not in body

    async def test_unauthenticated(self, app, client):
        async def _reject():
            raise AuthenticationError("missing authorization header")

        app.dependency_overrides[deps.get_current_user] = _reject
        resp = await client.get("/api/v1/activities/")
        assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------


def _push_payload() -> bytes:
    return json.dumps(
        {
            "ref": "refs/heads/main",
            "repository": {"full_name": "octo/hello"},
            "commits": [
                {"id": "c1", "message": "m", "url": "https://github.com/octo/hello/commit/c1"}
            ],
        }
    ).encode()


class TestWebhookRouter:
    @pytest.fixture
    def receiver(self, app):
        settings_service = AsyncMock()
        settings_service.list_users_tracking.return_value = [USER_ID]
        activity_service = AsyncMock()
        activity_service.store_activities.return_value = 1
        recv = WebhookReceiver(settings_service, activity_service, secret=WEBHOOK_SECRET)
        app.dependency_overrides[deps.get_webhook_receiver] = lambda: recv
        return recv, activity_service

    async def test_valid_delivery(self, client, receiver, mock_session):
        _, activity_service = receiver
        mock_session.begin_nested = MagicMock()
        body = _push_payload()
        resp = await client.post(
            "/api/v1/webhooks/github",
            content=body,
            headers={
                "X-GitHub-Event": "push",
                "X-Hub-Signature-256": compute_signature(WEBHOOK_SECRET, body),
                "Content-Type": "application/json",
            },
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "handled": True, "inserted": 1}
        activity_service.store_activities.assert_awaited_once()

    async def test_bad_signature(self, client, receiver):
        _, activity_service = receiver
        resp = await client.post(
            "/api/v1/webhooks/github",
            content=_push_payload(),
            headers={"X-GitHub-Event": "push", "X-Hub-Signature-256": "sha256=00"},
        )
        assert resp.status_code == 401
        activity_service.store_activities.assert_not_called()

    async def test_store_unavailable(self, app, client, receiver):
        del app.dependency_overrides[deps.get_session]
        body = _push_payload()
        with patch.object(deps, "_session_factory", None):
            resp = await client.post(
                "/api/v1/webhooks/github",
                content=body,
                headers={
                    "X-GitHub-Event": "push",
                    "X-Hub-Signature-256": compute_signature(WEBHOOK_SECRET, body),
                },
            )
            bad_sig = await client.post(
                "/api/v1/webhooks/github",
                content=body,
                headers={"X-GitHub-Event": "push", "X-Hub-Signature-256": "sha256=00"},
            )
        assert resp.status_code == 503
        assert bad_sig.status_code == 401

    async def test_unhandled_event_is_ok(self, client, receiver):
        body = json.dumps({"repository": {"full_name": "octo/hello"}}).encode()
        resp = await client.post(
            "/api/v1/webhooks/github",
            content=body,
            headers={
                "X-GitHub-Event": "fork",
                "X-Hub-Signature-256": compute_signature(WEBHOOK_SECRET, body),
            },
        )
        assert resp.status_code == 200
        assert resp.json()["handled"] is False


# ---------------------------------------------------------------------------
# GitHub sync
# ---------------------------------------------------------------------------


class TestGitHubRouter:
    async def test_sync(self, app, client):
        runner = AsyncMock()
        runner.sync_user.return_value = SyncResult(
            user_id=USER_ID,
            mode="tracked",
            fetched=5,
            normalized=4,
            inserted=3,
            by_kind={"commit": 3},
            repositories={"octo/a": "ok", "octo/b": "GitHub API error: 404 Not Found"},
            errors=["octo/b: GitHub API error: 404 Not Found"],
        )
        factory, _ = _github_factory()
        app.dependency_overrides[deps.get_sync_runner] = lambda: runner
        app.dependency_overrides[deps.get_github_client_factory] = lambda: factory

        resp = await client.post("/api/v1/github/sync")

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["activities_count"] == 3
        assert body["fetched"] == 5
        assert len(body["errors"]) == 1

    async def test_sync_upstream_failure_is_502(self, app, client):
        runner = AsyncMock()
        runner.sync_user.side_effect = SourceUnavailableError("down", status_code=500)
        factory, _ = _github_factory()
        app.dependency_overrides[deps.get_sync_runner] = lambda: runner
        app.dependency_overrides[deps.get_github_client_factory] = lambda: factory

        resp = await client.post("/api/v1/github/sync")
        assert resp.status_code == 502

    async def test_overview(self, app, client):
        runner = AsyncMock()
        runner.fetch_overview.return_value = {"user": {"login": "octo"}, "repositories": []}
        factory, _ = _github_factory()
        app.dependency_overrides[deps.get_sync_runner] = lambda: runner
        app.dependency_overrides[deps.get_github_client_factory] = lambda: factory

        resp = await client.get("/api/v1/github/sync")
        assert resp.status_code == 200
        assert resp.json()["user"] == {"login": "octo"}


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------


class TestActivitiesRouter:
    async def test_list(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.list.return_value = {
            "data": [_activity()],
            "next_cursor": None,
            "has_more": False,
            "total": 1,
        }
        app.dependency_overrides[deps.get_activity_service] = lambda: mock_svc

        resp = await client.get("/api/v1/activities/")

        assert resp.status_code == 200
        body = resp.json()
        assert body["meta"]["total"] == 1
        assert body["data"][0]["kind"] == "commit"
        assert mock_svc.list.call_args.kwargs["page_size"] == 50

    async def test_invalid_cursor(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.list.side_effect = InvalidCursorError("bad")
        app.dependency_overrides[deps.get_activity_service] = lambda: mock_svc

        resp = await client.get("/api/v1/activities/?cursor=garbage")
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Journal
# ---------------------------------------------------------------------------


class TestJournalRouter:
    async def test_generate(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.generate.return_value = _summary()
        app.dependency_overrides[deps.get_journal_service] = lambda: mock_svc

        resp = await client.post("/api/v1/journal/generate", json={"period": "daily"})

        assert resp.status_code == 201
        assert resp.json()["published"] is False
        assert mock_svc.generate.call_args.args[1:] == (USER_ID, "daily")

    async def test_generate_invalid_period(self, app, client):
        mock_svc = AsyncMock()
        app.dependency_overrides[deps.get_journal_service] = lambda: mock_svc
        resp = await client.post("/api/v1/journal/generate", json={"period": "hourly"})
        assert resp.status_code == 422
        mock_svc.generate.assert_not_called()

    async def test_generate_without_activity(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.generate.side_effect = ValidationError("no activities found for daily period")
        app.dependency_overrides[deps.get_journal_service] = lambda: mock_svc
        resp = await client.post("/api/v1/journal/generate", json={"period": "daily"})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "no activities found for daily period"

    async def test_publish(self, app, client):
        mock_svc = AsyncMock()
        summary = _summary(published=True)
        mock_svc.publish.return_value = summary
        app.dependency_overrides[deps.get_journal_service] = lambda: mock_svc

        resp = await client.post(f"/api/v1/journal/{summary.id}/publish")

        assert resp.status_code == 200
        assert resp.json()["published"] is True

    async def test_publish_not_found(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.publish.side_effect = NotFoundError("summary not found")
        app.dependency_overrides[deps.get_journal_service] = lambda: mock_svc
        resp = await client.post(f"/api/v1/journal/{uuid.uuid4()}/publish")
        assert resp.status_code == 404

    async def test_list(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.list.return_value = {
            "data": [_summary()],
            "next_cursor": None,
            "has_more": False,
            "total": 1,
        }
        app.dependency_overrides[deps.get_journal_service] = lambda: mock_svc
        resp = await client.get("/api/v1/journal/")
        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 1


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettingsRouter:
    async def test_list_repositories(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.list_repositories.side_effect = lambda session, user_id, repos: [
            {**r, "is_tracked": r["full_name"] == "octo/a"} for r in repos
        ]
        factory, github = _github_factory()
        app.dependency_overrides[deps.get_settings_service] = lambda: mock_svc
        app.dependency_overrides[deps.get_github_client_factory] = lambda: factory

        resp = await client.get("/api/v1/settings/repositories")

        assert resp.status_code == 200
        assert [r["is_tracked"] for r in resp.json()] == [True, False]
        github.get_user_repositories.assert_awaited_once()

    async def test_set_tracking(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.set_tracking.return_value = ["octo/a"]
        app.dependency_overrides[deps.get_settings_service] = lambda: mock_svc

        resp = await client.post(
            "/api/v1/settings/repositories", json={"repository": "octo/a", "is_tracked": True}
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "tracked_repositories": ["octo/a"]}

    async def test_update_preferences_missing_field(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.update_preferences.side_effect = ValidationError(
            "missing required field: is_public"
        )
        app.dependency_overrides[deps.get_settings_service] = lambda: mock_svc

        resp = await client.put(
            "/api/v1/settings/preferences", json={"summary_frequency": "daily"}
        )

        assert resp.status_code == 422
        assert "is_public" in resp.json()["detail"]

    async def test_list_integrations(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.list_integrations.return_value = [
            {
                "id": "notion",
                "provider": "notion",
                "name": "Notion",
                "is_connected": True,
                "last_sync": NOW,
            },
            {
                "id": "medium",
                "provider": "medium",
                "name": "Medium",
                "is_connected": False,
                "last_sync": None,
            },
        ]
        app.dependency_overrides[deps.get_settings_service] = lambda: mock_svc

        resp = await client.get("/api/v1/settings/integrations")

        assert resp.status_code == 200
        body = resp.json()
        assert [i["is_connected"] for i in body] == [True, False]
        assert body[1]["last_sync"] is None
        assert mock_svc.list_integrations.call_args.args[1] == USER_ID


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


class TestAnalyticsRouter:
    async def test_dashboard(self, app, client):
        mock_svc = AsyncMock()
        mock_svc.get_dashboard.return_value = {
            "range": "week",
            "productivity_score": 20,
            "streak_days": 1,
            "total_contributions": 1,
            "activity_heatmap": [{"date": "2026-01-15", "count": 1}],
            "repository_stats": [{"name": "octo/a", "activities": 1, "commits": 1}],
            "weekly_trends": [],
            "achievements": [{"name": "First Steps", "description": "d", "earned_at": NOW}],
            "recommendations": [],
        }
        app.dependency_overrides[deps.get_analytics_service] = lambda: mock_svc

        resp = await client.get("/api/v1/analytics/?range=week")

        assert resp.status_code == 200
        assert resp.json()["productivity_score"] == 20
        assert mock_svc.get_dashboard.call_args.args[2] == "week"


# ---------------------------------------------------------------------------
# Unreachable store
# ---------------------------------------------------------------------------


class TestUnreachableStore:
    """A configured database that refuses connections surfaces as 503."""

    @pytest.fixture
    async def unreachable(self, app):
        del app.dependency_overrides[deps.get_session]
        engine = create_async_engine("postgresql+asyncpg://u:p@127.0.0.1:1/nodb")
        factory = async_sessionmaker(engine, expire_on_commit=False)
        with patch.object(deps, "_session_factory", factory):
            yield
        await engine.dispose()

    async def test_webhook_delivery(self, app, client, unreachable):
        app.dependency_overrides[deps.get_webhook_receiver] = lambda: WebhookReceiver(
            deps.get_settings_service(), deps.get_activity_service(), secret=WEBHOOK_SECRET
        )
        body = json.dumps(
            {
                "action": "opened",
                "repository": {"full_name": "octo/hello"},
                "pull_request": {
                    "title": "Add feature",
                    "html_url": "https://github.com/octo/hello/pull/3",
                },
            }
        ).encode()

        resp = await client.post(
            "/api/v1/webhooks/github",
            content=body,
            headers={
                "X-GitHub-Event": "pull_request",
                "X-Hub-Signature-256": compute_signature(WEBHOOK_SECRET, body),
            },
        )

        assert resp.status_code == 503
        assert resp.json() == {"detail": "database connection not available"}

    async def test_activities_listing(self, client, unreachable):
        resp = await client.get("/api/v1/activities/")
        assert resp.status_code == 503

    async def test_bearer_lookup(self, app, client, unreachable, monkeypatch):
        monkeypatch.setenv("DEVJOURNAL_JWT_SECRET", "jwt-test-secret")
        del app.dependency_overrides[deps.get_current_user]
        token = AuthService.issue_access_token(USER_ID)

        resp = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert resp.status_code == 503
