"""Async GitHub REST client bound to one user's bearer credential."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from devjournal.services import SourceUnavailableError

log = structlog.get_logger("devjournal.engine")

GITHUB_API_URL = "https://api.github.com"
USER_AGENT = "devjournal"

_REPOS_PAGE_SIZE = 100
_USER_EVENTS_PAGE_SIZE = 100
_REPO_EVENTS_PAGE_SIZE = 50


class GitHubClient:
    """Thin async wrapper around the four GitHub endpoints ingestion needs.

    Every call issues exactly one request and reads only the first page.
    Non-2xx responses raise :class:`SourceUnavailableError`.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = GITHUB_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": USER_AGENT,
            },
            timeout=timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get_user(self) -> dict[str, Any]:
        """GET /user — the authenticated user's profile."""
        return await self._get("/user")

    async def get_user_repositories(self) -> list[dict[str, Any]]:
        """GET /user/repos — most recently updated first, one page."""
        return await self._get(
            "/user/repos", {"sort": "updated", "per_page": _REPOS_PAGE_SIZE}
        )

    async def get_user_events(self, login: str) -> list[dict[str, Any]]:
        """GET /users/{login}/events — the user's recent activity feed."""
        return await self._get(f"/users/{login}/events", {"per_page": _USER_EVENTS_PAGE_SIZE})

    async def get_repository_events(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """GET /repos/{owner}/{repo}/events — recent events of one repository."""
        return await self._get(
            f"/repos/{owner}/{repo}/events", {"per_page": _REPO_EVENTS_PAGE_SIZE}
        )

    # ── internal ───────────────────────────────────────────────────────────

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            log.warning("github.request_failed", path=path, error=str(exc))
            raise SourceUnavailableError(f"GitHub request failed: {exc}") from exc

        if not response.is_success:
            log.warning("github.error_status", path=path, status=response.status_code)
            raise SourceUnavailableError(
                f"GitHub API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        remaining = self._parse_header_int(response.headers.get("X-RateLimit-Remaining"))
        if remaining == 0:
            log.warning(
                "github.rate_limit_exhausted",
                path=path,
                reset=response.headers.get("X-RateLimit-Reset"),
            )
        return response.json()

    @staticmethod
    def _parse_header_int(value: str | None) -> int | None:
        if value is None:
            return None
        try:
            return int(value)
        except (ValueError, TypeError):
            return None
