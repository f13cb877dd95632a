"""Shared fixtures: an in-memory GitHubApi and a sleep that never waits."""

from __future__ import annotations

from typing import Any

import pytest

from repo_integrations.domain.entities import Page, RateLimitSnapshot, Resource
from repo_integrations.domain.exceptions import RepositoryNotFoundError, UpstreamError
from repo_integrations.services.fetchers import ResourceFetchers
from repo_integrations.services.rate_limit import RateLimitTracker

NOW = 1_700_000_000.0

RATE_LIMIT_HEADERS = {
    "x-ratelimit-limit": "60",
    "x-ratelimit-remaining": "59",
    "x-ratelimit-reset": "123456",
}


class RecordingSleep:
    """Async stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_pages(*sizes: int, prefix: str = "item") -> list[Page]:
    """Build a chain of pages with the given record counts."""
    pages: list[Page] = []
    for index, size in enumerate(sizes):
        last = index == len(sizes) - 1
        pages.append(
            Page(
                items=[{"id": f"{prefix}-{index}-{n}"} for n in range(size)],
                headers=RATE_LIMIT_HEADERS,
                next_url=None if last else f"https://api.test/page/{index + 2}",
            )
        )
    return pages


class FakeGitHubApi:
    """In-memory GitHubApi.

    ``failures`` maps a method name to the exception it should raise.
    Paginated listings are chains of :class:`Page` objects linked by
    ``next_url``.
    """

    def __init__(self) -> None:
        self.rate_limit = RateLimitSnapshot(limit=5000, remaining=4999, reset_at=int(NOW) + 3600)
        self.repository: dict[str, Any] = {
            "full_name": "GSA/code-gov-api",
            "description": "Code.gov API",
            "forks_count": 12,
            "watchers_count": 40,
            "stargazers_count": 40,
            "topics": ["government"],
            "has_issues": True,
            "organization": {
                "login": "GSA",
                "avatar_url": "https://avatars.test/gsa",
                "url": "https://api.github.com/orgs/GSA",
            },
            "ssh_url": "git@github.com:GSA/code-gov-api.git",
            "created_at": "2016-01-01T00:00:00Z",
            "updated_at": "2018-08-28T16:26:23Z",
        }
        self.readme = "Mock Readme."
        self.languages = {"JavaScript": 179061, "HTML": 8723, "CSS": 804}
        self.issue_pages: list[Page] = [
            Page(
                items=[
                    {
                        "html_url": "https://github.com/GSA/code-gov-api/issues/243",
                        "state": "open",
                        "title": "Add docs",
                        "labels": [{"name": "help wanted"}],
                    },
                    {
                        "html_url": "https://github.com/GSA/code-gov-api/pull/244",
                        "state": "open",
                        "title": "Docs PR",
                        "pull_request": {"url": "https://api.github.com/pulls/244"},
                    },
                ],
                headers=RATE_LIMIT_HEADERS,
            )
        ]
        self.contributor_pages: list[Page] = [
            Page(
                items=[
                    {
                        "login": "froi",
                        "html_url": "https://github.com/froi",
                        "avatar_url": "https://avatars.test/froi",
                        "contributions": 368,
                    }
                ],
                headers=RATE_LIMIT_HEADERS,
            )
        ]
        self.profiles: dict[str, dict[str, Any]] = {
            "froi": {
                "login": "froi",
                "name": "Froilan Irizarry",
                "company": "@fullstacknights ",
                "location": "Washington, DC",
                "email": None,
            }
        }
        self.issue_queries: list[dict[str, Any]] = []
        self.failures: dict[str, BaseException] = {}
        self.calls: list[str] = []

    def _record(self, method: str) -> None:
        self.calls.append(method)
        if method in self.failures:
            raise self.failures[method]

    async def get_rate_limit_status(self) -> RateLimitSnapshot:
        self._record("get_rate_limit_status")
        return self.rate_limit

    async def get_repository(self, owner: str, name: str) -> Resource:
        self._record("get_repository")
        return Resource(data=self.repository, headers=RATE_LIMIT_HEADERS)

    async def get_readme(self, owner: str, name: str) -> Resource:
        self._record("get_readme")
        return Resource(data=self.readme, headers=RATE_LIMIT_HEADERS)

    async def get_languages(self, owner: str, name: str) -> Resource:
        self._record("get_languages")
        return Resource(data=self.languages, headers=RATE_LIMIT_HEADERS)

    async def list_issues_page(
        self, owner, name, *, state, labels, per_page, page=1, since=None
    ) -> Page:
        self._record("list_issues_page")
        self.issue_queries.append(
            {"state": state, "labels": labels, "per_page": per_page, "since": since}
        )
        return self.issue_pages[0]

    async def list_contributors_page(self, owner, name, *, anon, per_page, page=1) -> Page:
        self._record("list_contributors_page")
        return self.contributor_pages[0]

    def has_next_page(self, page: Page) -> bool:
        return page.next_url is not None

    async def get_next_page(self, page: Page) -> Page:
        self._record("get_next_page")
        for chain in (self.issue_pages, self.contributor_pages):
            for index, candidate in enumerate(chain):
                if candidate is page:
                    return chain[index + 1]
        raise AssertionError("unknown page")

    async def get_user_profile(self, username: str) -> Resource:
        self._record("get_user_profile")
        if username not in self.profiles:
            raise UpstreamError("Not Found", code=404, status="Not Found")
        return Resource(data=self.profiles[username], headers=RATE_LIMIT_HEADERS)


def not_found(headers: dict[str, str] | None = None) -> UpstreamError:
    return RepositoryNotFoundError(
        "Not Found", code=404, status="Not Found", headers=headers
    )


@pytest.fixture
def api() -> FakeGitHubApi:
    return FakeGitHubApi()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def tracker(api: FakeGitHubApi, sleep: RecordingSleep) -> RateLimitTracker:
    return RateLimitTracker(api, sleep=sleep, clock=lambda: NOW)


@pytest.fixture
def fetchers(api: FakeGitHubApi, tracker: RateLimitTracker) -> ResourceFetchers:
    return ResourceFetchers(api, tracker)
