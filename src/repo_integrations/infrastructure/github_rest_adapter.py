"""GitHub REST API adapter — implements the GitHubApi port."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from repo_integrations.domain.entities import Page, RateLimitSnapshot, Resource
from repo_integrations.domain.exceptions import (
    GitHubRateLimitError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"
_JSON_MEDIA_TYPE = "application/vnd.github.v3+json"
_RAW_MEDIA_TYPE = "application/vnd.github.v3.raw"


class GitHubRestAdapter:
    """Concrete GitHubApi backed by the GitHub v3 REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str | None = None,
        *,
        base_url: str = _GITHUB_API,
        user_agent: str = "repo-integrations/1.0",
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._api_headers: dict[str, str] = {
            "Accept": _JSON_MEDIA_TYPE,
            "User-Agent": user_agent,
        }
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"

    async def get_rate_limit_status(self) -> RateLimitSnapshot:
        """GET /rate_limit → core budget."""
        resp = await self._api_get("/rate_limit", not_found=UpstreamError)
        data = _json(resp)
        core = data.get("resources", {}).get("core") or data.get("rate") or {}
        return RateLimitSnapshot(
            limit=core.get("limit"),
            remaining=core.get("remaining"),
            reset_at=core.get("reset"),
        )

    async def get_repository(self, owner: str, name: str) -> Resource:
        """GET /repos/{owner}/{repo}."""
        resp = await self._api_get(f"/repos/{owner}/{name}")
        return Resource(data=_json(resp), headers=dict(resp.headers))

    async def get_readme(self, owner: str, name: str) -> Resource:
        """GET /repos/{owner}/{repo}/readme as raw text."""
        resp = await self._api_get(
            f"/repos/{owner}/{name}/readme",
            headers={"Accept": _RAW_MEDIA_TYPE},
        )
        return Resource(data=resp.text, headers=dict(resp.headers))

    async def get_languages(self, owner: str, name: str) -> Resource:
        """GET /repos/{owner}/{repo}/languages → {lang: bytes}."""
        resp = await self._api_get(f"/repos/{owner}/{name}/languages")
        return Resource(data=_json(resp), headers=dict(resp.headers))

    async def list_issues_page(
        self,
        owner: str,
        name: str,
        *,
        state: str,
        labels: str,
        per_page: int,
        page: int = 1,
        since: str | None = None,
    ) -> Page:
        """GET /repos/{owner}/{repo}/issues (one page)."""
        params = {
            "state": state,
            "labels": labels,
            "per_page": str(per_page),
            "page": str(page),
        }
        if since:
            params["since"] = since
        resp = await self._api_get(f"/repos/{owner}/{name}/issues", params=params)
        return self._to_page(resp)

    async def list_contributors_page(
        self,
        owner: str,
        name: str,
        *,
        anon: bool,
        per_page: int,
        page: int = 1,
    ) -> Page:
        """GET /repos/{owner}/{repo}/contributors (one page)."""
        params = {
            "anon": "true" if anon else "false",
            "per_page": str(per_page),
            "page": str(page),
        }
        resp = await self._api_get(f"/repos/{owner}/{name}/contributors", params=params)
        return self._to_page(resp)

    def has_next_page(self, page: Page) -> bool:
        return page.next_url is not None

    async def get_next_page(self, page: Page) -> Page:
        """Follow the ``rel="next"`` link of *page*."""
        if page.next_url is None:
            raise ValueError("get_next_page() called on the last page")
        resp = await self._request(page.next_url)
        return self._to_page(resp)

    async def get_user_profile(self, username: str) -> Resource:
        """GET /users/{username}."""
        resp = await self._api_get(f"/users/{username}", not_found=UpstreamError)
        return Resource(data=_json(resp), headers=dict(resp.headers))

    # ── Internals ───────────────────────────────────────────────────────

    @staticmethod
    def _to_page(resp: httpx.Response) -> Page:
        items: list[dict[str, Any]] = _json(resp)
        next_link = resp.links.get("next")
        return Page(
            items=items,
            headers=dict(resp.headers),
            next_url=next_link.get("url") if next_link else None,
        )

    async def _api_get(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        not_found: type[UpstreamError] = RepositoryNotFoundError,
    ) -> httpx.Response:
        return await self._request(
            f"{self._base_url}{endpoint}",
            params=params,
            headers=headers,
            not_found=not_found,
        )

    async def _request(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        not_found: type[UpstreamError] = RepositoryNotFoundError,
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation.

        A 404 raises *not_found*.  Endpoints outside /repos pass
        :class:`UpstreamError` so a missing user is not reported as a missing
        repository.
        """
        request_headers = {**self._api_headers, **(headers or {})}
        try:
            resp = await self._client.get(url, headers=request_headers, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Network error fetching {url}: {exc}") from exc

        logger.debug(
            "GET %s → %d (remaining=%s)",
            url,
            resp.status_code,
            resp.headers.get("x-ratelimit-remaining", "?"),
        )

        if resp.is_success:
            return resp

        error_kwargs: dict[str, Any] = {
            "code": resp.status_code,
            "status": resp.reason_phrase,
            "headers": dict(resp.headers),
        }
        message = _error_message(resp)

        if resp.status_code == 404:
            raise not_found(message, **error_kwargs)

        if resp.status_code == 403:
            if resp.headers.get("x-ratelimit-remaining", "") == "0":
                raise GitHubRateLimitError(
                    f"GitHub API rate limit exceeded. Resets at "
                    f"{_format_reset(resp.headers.get('x-ratelimit-reset', ''))}.",
                    **error_kwargs,
                )
            raise RepositoryAccessDeniedError(message, **error_kwargs)

        if resp.status_code == 429:
            raise GitHubRateLimitError(
                "GitHub API rate limit exceeded (HTTP 429).", **error_kwargs
            )

        raise UpstreamError(message, **error_kwargs)


def _json(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamError(
            f"GitHub API returned a non-JSON body for {resp.request.url}",
            code=resp.status_code,
            status=resp.reason_phrase,
            headers=dict(resp.headers),
        ) from exc


def _error_message(resp: httpx.Response) -> str:
    """Prefer GitHub's JSON ``message``; fall back to the raw body."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.text or f"GitHub API returned HTTP {resp.status_code}"


def _format_reset(reset_raw: str) -> str:
    try:
        return datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
            "%Y-%m-%d %H:%M:%S UTC"
        )
    except (ValueError, OSError):
        return reset_raw or "unknown"
