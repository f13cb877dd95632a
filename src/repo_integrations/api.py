"""Public entry points: wire settings, HTTP client and services together."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Sequence

import httpx

from repo_integrations.domain.entities import RepositoryRecord
from repo_integrations.domain.value_objects import RepoRef
from repo_integrations.infrastructure.config import Settings, get_settings
from repo_integrations.infrastructure.github_rest_adapter import GitHubRestAdapter
from repo_integrations.services.aggregator import RepositoryAggregator
from repo_integrations.services.fetchers import ResourceFetchers
from repo_integrations.services.rate_limit import RateLimitTracker


def build_aggregator(adapter: GitHubRestAdapter, settings: Settings) -> RepositoryAggregator:
    """Assemble tracker, fetchers and aggregator around one adapter."""
    tracker = RateLimitTracker(
        adapter,
        courtesy_delay=settings.courtesy_delay_seconds,
        threshold=settings.rate_limit_threshold,
    )
    fetchers = ResourceFetchers(
        adapter,
        tracker,
        issues_state=settings.issues_state,
        issues_labels=settings.issues_labels,
        issues_per_page=settings.issues_per_page,
        issues_since=settings.issues_since,
        contributors_anon=settings.contributors_anon,
        contributors_per_page=settings.contributors_per_page,
    )
    return RepositoryAggregator(
        tracker, fetchers, max_concurrency=settings.max_concurrent_repositories
    )


@asynccontextmanager
async def connect(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[RepositoryAggregator]:
    """Open an HTTP client for the lifetime of the block and yield an aggregator.

    Each connection owns its own rate-limit tracker, so connections opened
    with different tokens never share a budget.
    """
    settings = settings or get_settings()
    token = settings.github_token.get_secret_value() if settings.github_token else None
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout), transport=transport
    ) as client:
        adapter = GitHubRestAdapter(
            client,
            token=token,
            base_url=settings.github_api_url,
            user_agent=settings.user_agent,
        )
        yield build_aggregator(adapter, settings)


async def get_data(
    owner: str, name: str, settings: Settings | None = None
) -> RepositoryRecord:
    """Aggregate a single repository with a short-lived connection."""
    async with connect(settings) as aggregator:
        return await aggregator.aggregate(owner, name)


async def get_data_many(
    refs: Sequence[RepoRef | str], settings: Settings | None = None
) -> list[RepositoryRecord | BaseException]:
    """Aggregate a worklist of repositories over one connection."""
    async with connect(settings) as aggregator:
        return await aggregator.aggregate_many(refs)
