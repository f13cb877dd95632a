"""Domain exception hierarchy.

The REST adapter raises these; the aggregator is the only layer that
downgrades them into empty fields.  :class:`UpstreamError` keeps the
headers of the failed response so the rate-limit budget can still be read.
"""

from __future__ import annotations

from typing import Mapping

from repo_integrations.domain.entities import RateLimitSnapshot


class RepoIntegrationsError(Exception):
    """Base exception for the entire package."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidRepositoryRefError(RepoIntegrationsError):
    """The supplied value is not an ``owner/name`` pair or a GitHub URL."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class UpstreamError(RepoIntegrationsError):
    """A remote call failed (network error or non-2xx response)."""

    def __init__(
        self,
        message: str | None = None,
        *,
        code: int | None = None,
        status: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message or status or "GitHub API request failed")
        self.message = message
        self.code = code
        self.status = status
        self.headers = dict(headers) if headers is not None else None

    @property
    def rate_limit(self) -> RateLimitSnapshot:
        """Snapshot salvaged from the failed response's headers."""
        return RateLimitSnapshot.from_headers(self.headers)


class RepositoryNotFoundError(UpstreamError):
    """The repository (or sub-resource) does not exist (404)."""


class RepositoryAccessDeniedError(UpstreamError):
    """Access to the resource was denied (403)."""


class GitHubRateLimitError(UpstreamError):
    """GitHub API rate limit exceeded (429 / 403 with an exhausted budget)."""


# ── Engine errors ───────────────────────────────────────────────────────────


class PaginationError(RepoIntegrationsError):
    """The upstream kept reporting a next page without advancing its cursor."""


class RateLimitCheckError(RepoIntegrationsError):
    """The advisory pre-flight rate-limit lookup failed."""
