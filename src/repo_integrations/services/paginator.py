"""Paginator: drains a multi-page listing into one ordered list."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from repo_integrations.domain.entities import Page, RateLimitSnapshot
from repo_integrations.domain.exceptions import PaginationError
from repo_integrations.domain.ports.github_api import GitHubApi
from repo_integrations.services.rate_limit import RateLimitTracker

logger = logging.getLogger(__name__)

FirstPageFetcher = Callable[[], Awaitable[Page]]


class Paginator:
    """Walks every page of a listing, throttling before each request.

    Records are concatenated in upstream page order with no deduplication or
    sorting.  Any page failure propagates and the partial list is dropped.
    """

    def __init__(self, client: GitHubApi, tracker: RateLimitTracker) -> None:
        self._client = client
        self._tracker = tracker

    async def drain(
        self,
        fetch_first: FirstPageFetcher,
        rate_limit: RateLimitSnapshot,
    ) -> tuple[list[dict[str, Any]], RateLimitSnapshot]:
        """Return all records and the last observed rate-limit snapshot."""
        rate_limit = await self._tracker.pace(rate_limit)
        page = await fetch_first()
        rate_limit = _observed(page, rate_limit)
        items = list(page.items)
        pages = 1

        followed: set[str] = set()
        while self._client.has_next_page(page):
            cursor = page.next_url
            if cursor is None or cursor in followed:
                raise PaginationError(
                    f"Upstream reported another page but the cursor did not advance "
                    f"after {pages} page(s): {cursor!r}"
                )
            followed.add(cursor)

            rate_limit = await self._tracker.pace(rate_limit)
            page = await self._client.get_next_page(page)
            rate_limit = _observed(page, rate_limit)
            items.extend(page.items)
            pages += 1
            logger.debug("Fetched page %d (%d records so far)", pages, len(items))

        return items, rate_limit


def _observed(page: Page, previous: RateLimitSnapshot) -> RateLimitSnapshot:
    snapshot = page.rate_limit
    return previous if snapshot.is_empty else snapshot
