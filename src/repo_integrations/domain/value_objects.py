"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass

from repo_integrations.domain.exceptions import InvalidRepositoryRefError

_GITHUB_URL_RE = re.compile(
    r"^https?://github\.com/(?P<owner>[A-Za-z0-9\-_.]+)/(?P<name>[A-Za-z0-9\-_.]+?)(?:\.git)?/?$"
)
_SHORT_REF_RE = re.compile(r"^(?P<owner>[A-Za-z0-9\-_.]+)/(?P<name>[A-Za-z0-9\-_.]+)$")


@dataclass(frozen=True, slots=True)
class RepoRef:
    """Validated reference to a GitHub repository.

    Accepts either ``owner/name`` or a URL like
    ``https://github.com/GSA/code-gov-api``.
    """

    owner: str
    name: str

    @classmethod
    def from_string(cls, value: str) -> RepoRef:
        """Parse and validate a raw reference string."""
        value = value.strip()
        match = _GITHUB_URL_RE.match(value) or _SHORT_REF_RE.match(value)
        if not match:
            raise InvalidRepositoryRefError(
                f"Invalid repository reference: '{value}'. "
                "Expected <owner>/<name> or https://github.com/<owner>/<name>"
            )
        return cls(owner=match["owner"], name=match["name"])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"
