"""Port: GitHub API — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from repo_integrations.domain.entities import Page, RateLimitSnapshot, Resource


class GitHubApi(Protocol):
    """Abstract contract for the remote calls the engine needs.

    Every method raises :class:`~repo_integrations.domain.exceptions.UpstreamError`
    on failure, carrying the failed response's headers when there was one.
    """

    async def get_rate_limit_status(self) -> RateLimitSnapshot:
        """Return the current core rate-limit budget."""
        ...

    async def get_repository(self, owner: str, name: str) -> Resource:
        """Return the raw repository record."""
        ...

    async def get_readme(self, owner: str, name: str) -> Resource:
        """Return the raw README text."""
        ...

    async def get_languages(self, owner: str, name: str) -> Resource:
        """Return the language → byte-count mapping."""
        ...

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
        """Return one page of raw issue records (pull requests included).

        *since* (ISO 8601) limits the listing to issues updated after it.
        """
        ...

    async def list_contributors_page(
        self,
        owner: str,
        name: str,
        *,
        anon: bool,
        per_page: int,
        page: int = 1,
    ) -> Page:
        """Return one page of raw contributor records."""
        ...

    def has_next_page(self, page: Page) -> bool:
        """Whether the upstream reports another page after *page*."""
        ...

    async def get_next_page(self, page: Page) -> Page:
        """Fetch the page following *page*."""
        ...

    async def get_user_profile(self, username: str) -> Resource:
        """Return the raw public profile of *username*."""
        ...
