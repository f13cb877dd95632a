"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, TypeVar

T = TypeVar("T")

_LIMIT_HEADER = "x-ratelimit-limit"
_REMAINING_HEADER = "x-ratelimit-remaining"
_RESET_HEADER = "x-ratelimit-reset"


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ── Rate limiting ───────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RateLimitSnapshot:
    """Budget state of one rate-limit window.

    ``reset_at`` is expressed in epoch seconds, the GitHub convention.  A
    snapshot built from a response without rate-limit headers is *empty*
    (every field ``None``), which is not the same thing as a snapshot whose
    values are all zero.
    """

    limit: int | None = None
    remaining: int | None = None
    reset_at: int | None = None

    @classmethod
    def empty(cls) -> RateLimitSnapshot:
        return cls()

    @classmethod
    def from_headers(cls, headers: Mapping[str, Any] | None) -> RateLimitSnapshot:
        """Read the ``x-ratelimit-*`` headers, case-insensitively."""
        if not headers:
            return cls()
        lowered = {str(k).lower(): v for k, v in headers.items()}
        if not any(
            name in lowered for name in (_LIMIT_HEADER, _REMAINING_HEADER, _RESET_HEADER)
        ):
            return cls()
        return cls(
            limit=_as_int(lowered.get(_LIMIT_HEADER)),
            remaining=_as_int(lowered.get(_REMAINING_HEADER)),
            reset_at=_as_int(lowered.get(_RESET_HEADER)),
        )

    @property
    def is_empty(self) -> bool:
        return self.limit is None and self.remaining is None and self.reset_at is None

    @property
    def percent_remaining(self) -> float:
        """Fraction of the budget left; ``0.0`` when the limit is zero or unknown."""
        if not self.limit or self.limit <= 0:
            return 0.0
        return (self.remaining or 0) / self.limit


# ── Upstream responses ──────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Resource:
    """A single (non-paginated) response from the remote API."""

    data: Any
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def rate_limit(self) -> RateLimitSnapshot:
        return RateLimitSnapshot.from_headers(self.headers)


@dataclass(frozen=True, slots=True)
class Page:
    """One page of a paginated listing.

    ``next_url`` is the continuation cursor; ``None`` marks the last page.
    """

    items: list[dict[str, Any]]
    headers: Mapping[str, str] = field(default_factory=dict)
    next_url: str | None = None

    @property
    def rate_limit(self) -> RateLimitSnapshot:
        return RateLimitSnapshot.from_headers(self.headers)


# ── Failures as data ────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """Upstream error attributes; each one is optional."""

    code: int | None = None
    status: str | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class ClassifiedError:
    error_info: ErrorInfo
    rate_limit: RateLimitSnapshot


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of one resource fetch.

    On success ``data`` holds the mapped payload and ``error`` is ``None``.
    On failure ``data`` is ``None``, ``error`` describes the failure and
    ``cause`` keeps the original exception for callers that must re-raise.
    """

    data: T | None
    rate_limit: RateLimitSnapshot
    error: ErrorInfo | None = None
    cause: BaseException | None = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Re-raise the original failure, if there was one."""
        if self.cause is not None:
            raise self.cause


# ── Mapped records ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class OrganizationSummary:
    login: str
    avatar_url: str | None = None
    url: str | None = None


@dataclass(frozen=True, slots=True)
class RepoSummary:
    """High-level metadata about a GitHub repository."""

    full_name: str
    description: str | None = None
    title: str | None = None
    forks_count: int = 0
    watchers_count: int = 0
    stargazers_count: int = 0
    topics: list[str] = field(default_factory=list)
    has_issues: bool = False
    organization: OrganizationSummary | None = None
    ssh_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True, slots=True)
class IssueSummary:
    issue_url: str | None
    state: str | None = None
    title: str | None = None
    body: str | None = None
    labels: list[str] = field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True, slots=True)
class ContributorSummary:
    """A contributor, enriched with their public profile when they have one."""

    username: str | None
    gh_profile: str | None = None
    avatar_url: str | None = None
    contributions: int = 0
    name: str | None = None
    email: str | None = None
    company: str | None = None
    location: str | None = None


@dataclass(slots=True)
class RepositoryRecord:
    """Everything gathered for one repository.

    ``issues`` is ``None`` when the repository has issue tracking disabled,
    and a (possibly empty) list otherwise.  ``errors`` names every resource
    that was replaced by an empty default.
    """

    repo: RepoSummary
    readme: str = ""
    languages: list[str] = field(default_factory=list)
    issues: list[IssueSummary] | None = None
    contributors: list[ContributorSummary] = field(default_factory=list)
    rate_limit: RateLimitSnapshot = field(default_factory=RateLimitSnapshot)
    errors: dict[str, ErrorInfo] = field(default_factory=dict)
