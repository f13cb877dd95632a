"""Repository aggregator, the main orchestration pipeline.

Runs every resource fetcher for one repository, strictly one after another,
and applies a fixed fallback policy:

* repository data is mandatory; its failure propagates to the caller;
* README, languages, issues and contributors degrade to an empty value and
  the failure is recorded in :attr:`RepositoryRecord.errors`;
* issues are only fetched when the repository has issue tracking enabled,
  otherwise the field stays ``None``;
* the leading rate-limit check is advisory and never blocks aggregation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence, TypeVar

from repo_integrations.domain.entities import (
    FetchResult,
    RateLimitSnapshot,
    RepositoryRecord,
)
from repo_integrations.domain.exceptions import RateLimitCheckError
from repo_integrations.domain.value_objects import RepoRef
from repo_integrations.services.fetchers import ResourceFetchers
from repo_integrations.services.rate_limit import RateLimitTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RepositoryAggregator:
    """Orchestrates the full per-repository fetch.

    Parameters
    ----------
    tracker:
        Rate-limit tracker of the connected client.
    fetchers:
        Guarded fetch operations bound to the same client.
    max_concurrency:
        Upper bound on repositories aggregated at once by
        :meth:`aggregate_many`.
    """

    def __init__(
        self,
        tracker: RateLimitTracker,
        fetchers: ResourceFetchers,
        max_concurrency: int = 4,
    ) -> None:
        self._tracker = tracker
        self._fetchers = fetchers
        self._max_concurrency = max(1, max_concurrency)

    # ── Public entry points ─────────────────────────────────────────────

    async def aggregate(self, owner: str, name: str) -> RepositoryRecord:
        """Fetch and compose everything known about ``owner/name``."""
        full_name = f"{owner}/{name}"
        logger.info("Aggregating %s", full_name)

        rate_limit = await self._preflight()

        repo_result = await self._fetchers.fetch_repo_data(owner, name, rate_limit)
        repo_result.raise_for_error()
        assert repo_result.data is not None
        record = RepositoryRecord(repo=repo_result.data, rate_limit=repo_result.rate_limit)

        readme = await self._fetchers.fetch_readme(owner, name, record.rate_limit)
        record.readme = self._settle(record, "readme", readme, "")

        languages = await self._fetchers.fetch_languages(owner, name, record.rate_limit)
        record.languages = self._settle(record, "languages", languages, [])

        if record.repo.has_issues:
            issues = await self._fetchers.fetch_issues(owner, name, record.rate_limit)
            record.issues = self._settle(record, "issues", issues, [])
        else:
            logger.debug("Issue tracking disabled for %s; skipping issues", full_name)

        contributors = await self._fetchers.fetch_contributors(owner, name, record.rate_limit)
        record.contributors = self._settle(record, "contributors", contributors, [])

        logger.info(
            "Aggregated %s (%d degraded resource(s), %s requests remaining)",
            full_name,
            len(record.errors),
            record.rate_limit.remaining,
        )
        return record

    async def aggregate_many(
        self, refs: Sequence[RepoRef | str]
    ) -> list[RepositoryRecord | BaseException]:
        """Aggregate a worklist concurrently.

        Results come back in input order.  A repository whose aggregation
        fails is represented by its exception so the rest of the batch still
        completes.
        """
        sem = asyncio.Semaphore(self._max_concurrency)

        async def _one(ref: RepoRef | str) -> RepositoryRecord:
            if isinstance(ref, str):
                ref = RepoRef.from_string(ref)
            async with sem:
                return await self.aggregate(ref.owner, ref.name)

        results = await asyncio.gather(*(_one(ref) for ref in refs), return_exceptions=True)
        for ref, result in zip(refs, results):
            if isinstance(result, BaseException):
                logger.error("Aggregation of %s failed: %s", ref, result)
        return list(results)

    # ── Steps ───────────────────────────────────────────────────────────

    async def _preflight(self) -> RateLimitSnapshot:
        try:
            return await self._tracker.preflight()
        except RateLimitCheckError as exc:
            logger.warning("%s; continuing without a rate-limit snapshot", exc)
            return RateLimitSnapshot.empty()

    @staticmethod
    def _settle(
        record: RepositoryRecord,
        resource: str,
        result: FetchResult[T],
        default: T,
    ) -> T:
        """Fold *result* into *record*, substituting *default* on failure."""
        record.rate_limit = result.rate_limit
        if result.error is not None:
            record.errors[resource] = result.error
            return default
        return default if result.data is None else result.data
