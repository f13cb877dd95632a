"""Resource fetchers, one guarded operation per kind of repository data.

Every fetcher follows the same template: throttle, call the API (directly or
through the :class:`Paginator`), map the payload, and on failure hand the
exception to :func:`classify`.  Fetchers therefore never raise; they return
a :class:`FetchResult` whose ``error`` says what went wrong.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, TypeVar

from repo_integrations.domain.entities import (
    ContributorSummary,
    FetchResult,
    IssueSummary,
    RateLimitSnapshot,
    RepoSummary,
    Resource,
)
from repo_integrations.domain.ports.github_api import GitHubApi
from repo_integrations.services.error_classifier import classify
from repo_integrations.services.mappers import (
    is_pull_request,
    map_contributor,
    map_issue,
    map_languages,
    map_repository,
)
from repo_integrations.services.paginator import Paginator
from repo_integrations.services.rate_limit import RateLimitTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[RateLimitSnapshot], Awaitable[tuple[T, RateLimitSnapshot]]]


def _latest(observed: RateLimitSnapshot, previous: RateLimitSnapshot) -> RateLimitSnapshot:
    return previous if observed.is_empty else observed


class ResourceFetchers:
    """Guarded fetch operations for a single connected client.

    Parameters
    ----------
    client:
        Remote API implementation.
    tracker:
        Rate-limit tracker scoped to *client*.
    issues_state, issues_labels, issues_per_page, issues_since:
        Query used for the issues listing.
    contributors_anon, contributors_per_page:
        Query used for the contributors listing.
    """

    def __init__(
        self,
        client: GitHubApi,
        tracker: RateLimitTracker,
        *,
        issues_state: str = "open",
        issues_labels: str = "help wanted",
        issues_per_page: int = 10,
        issues_since: str | None = None,
        contributors_anon: bool = False,
        contributors_per_page: int = 10,
    ) -> None:
        self._client = client
        self._tracker = tracker
        self._paginator = Paginator(client, tracker)
        self._issues_state = issues_state
        self._issues_labels = issues_labels
        self._issues_per_page = issues_per_page
        self._issues_since = issues_since
        self._contributors_anon = contributors_anon
        self._contributors_per_page = contributors_per_page

    # ── Template ────────────────────────────────────────────────────────

    async def guarded_fetch(
        self,
        resource: str,
        operation: Operation[T],
        rate_limit: RateLimitSnapshot,
    ) -> FetchResult[T]:
        """Run *operation* and convert any failure into a result."""
        try:
            data, rate_limit = await operation(rate_limit)
        except Exception as exc:
            classified = classify(exc)
            logger.warning(
                "Failed to fetch %s: %s (code=%s)",
                resource,
                classified.error_info.message,
                classified.error_info.code,
            )
            return FetchResult(
                data=None,
                rate_limit=_latest(classified.rate_limit, rate_limit),
                error=classified.error_info,
                cause=exc,
            )
        return FetchResult(data=data, rate_limit=rate_limit)

    async def _single(
        self,
        request: Callable[[], Awaitable[Resource]],
        mapper: Callable[[Any], T],
        rate_limit: RateLimitSnapshot,
    ) -> tuple[T, RateLimitSnapshot]:
        rate_limit = await self._tracker.pace(rate_limit)
        resource = await request()
        return mapper(resource.data), _latest(resource.rate_limit, rate_limit)

    # ── Resources ───────────────────────────────────────────────────────

    async def fetch_repo_data(
        self, owner: str, name: str, rate_limit: RateLimitSnapshot
    ) -> FetchResult[RepoSummary]:
        async def operation(snapshot: RateLimitSnapshot) -> tuple[RepoSummary, RateLimitSnapshot]:
            return await self._single(
                lambda: self._client.get_repository(owner, name), map_repository, snapshot
            )

        return await self.guarded_fetch("repository", operation, rate_limit)

    async def fetch_readme(
        self, owner: str, name: str, rate_limit: RateLimitSnapshot
    ) -> FetchResult[str]:
        async def operation(snapshot: RateLimitSnapshot) -> tuple[str, RateLimitSnapshot]:
            return await self._single(
                lambda: self._client.get_readme(owner, name), str, snapshot
            )

        return await self.guarded_fetch("readme", operation, rate_limit)

    async def fetch_languages(
        self, owner: str, name: str, rate_limit: RateLimitSnapshot
    ) -> FetchResult[list[str]]:
        async def operation(snapshot: RateLimitSnapshot) -> tuple[list[str], RateLimitSnapshot]:
            return await self._single(
                lambda: self._client.get_languages(owner, name), map_languages, snapshot
            )

        return await self.guarded_fetch("languages", operation, rate_limit)

    async def fetch_issues(
        self, owner: str, name: str, rate_limit: RateLimitSnapshot
    ) -> FetchResult[list[IssueSummary]]:
        """Drain the issue listing, excluding pull requests."""

        async def operation(
            snapshot: RateLimitSnapshot,
        ) -> tuple[list[IssueSummary], RateLimitSnapshot]:
            records, snapshot = await self._paginator.drain(
                lambda: self._client.list_issues_page(
                    owner,
                    name,
                    state=self._issues_state,
                    labels=self._issues_labels,
                    per_page=self._issues_per_page,
                    since=self._issues_since,
                ),
                snapshot,
            )
            issues = [map_issue(r) for r in records if not is_pull_request(r)]
            if len(issues) != len(records):
                logger.debug(
                    "Dropped %d pull request(s) from %s/%s issues",
                    len(records) - len(issues),
                    owner,
                    name,
                )
            return issues, snapshot

        return await self.guarded_fetch("issues", operation, rate_limit)

    async def fetch_contributors(
        self, owner: str, name: str, rate_limit: RateLimitSnapshot
    ) -> FetchResult[list[ContributorSummary]]:
        """Drain the contributor listing and enrich each entry with its profile.

        Profile lookups run one after another, each re-throttled, since they
        draw on the same budget as every other call.
        """

        async def operation(
            snapshot: RateLimitSnapshot,
        ) -> tuple[list[ContributorSummary], RateLimitSnapshot]:
            records, snapshot = await self._paginator.drain(
                lambda: self._client.list_contributors_page(
                    owner,
                    name,
                    anon=self._contributors_anon,
                    per_page=self._contributors_per_page,
                ),
                snapshot,
            )
            contributors: list[ContributorSummary] = []
            for record in records:
                login = record.get("login")
                if not login:
                    # anonymous contributor
                    contributors.append(map_contributor(record))
                    continue
                snapshot = await self._tracker.pace(snapshot)
                profile = await self._client.get_user_profile(login)
                snapshot = _latest(profile.rate_limit, snapshot)
                contributors.append(map_contributor(record, profile.data))
            return contributors, snapshot

        return await self.guarded_fetch("contributors", operation, rate_limit)
