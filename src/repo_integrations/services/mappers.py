"""Project raw GitHub records onto the package's summaries."""

from __future__ import annotations

from typing import Any, Mapping

from repo_integrations.domain.entities import (
    ContributorSummary,
    IssueSummary,
    OrganizationSummary,
    RepoSummary,
)


def map_repository(data: Mapping[str, Any]) -> RepoSummary:
    org = data.get("organization")
    organization = (
        OrganizationSummary(
            login=org.get("login", ""),
            avatar_url=org.get("avatar_url"),
            url=org.get("url"),
        )
        if org
        else None
    )
    return RepoSummary(
        full_name=data.get("full_name", ""),
        description=data.get("description"),
        title=data.get("title"),
        forks_count=data.get("forks_count") or 0,
        watchers_count=data.get("watchers_count") or 0,
        stargazers_count=data.get("stargazers_count") or 0,
        topics=list(data.get("topics") or []),
        has_issues=bool(data.get("has_issues")),
        organization=organization,
        ssh_url=data.get("ssh_url"),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


def map_languages(data: Mapping[str, int]) -> list[str]:
    """Language names in upstream order (largest byte count first)."""
    return list(data)


def is_pull_request(record: Mapping[str, Any]) -> bool:
    """The issues endpoint also lists pull requests; they carry a ``pull_request`` key."""
    return "pull_request" in record


def _label_names(labels: list[Any]) -> list[str]:
    """Label names; labels arrive as objects or, occasionally, bare strings."""
    names = []
    for label in labels:
        name = label.get("name") if isinstance(label, Mapping) else label
        if name:
            names.append(str(name))
    return names


def map_issue(data: Mapping[str, Any]) -> IssueSummary:
    return IssueSummary(
        issue_url=data.get("html_url") or data.get("url"),
        state=data.get("state"),
        title=data.get("title"),
        body=data.get("body"),
        labels=_label_names(data.get("labels") or []),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


def map_contributor(
    data: Mapping[str, Any], profile: Mapping[str, Any] | None = None
) -> ContributorSummary:
    """Merge a contributor listing entry with the user's public profile."""
    profile = profile or {}
    return ContributorSummary(
        username=data.get("login"),
        gh_profile=data.get("html_url"),
        avatar_url=data.get("avatar_url"),
        contributions=data.get("contributions") or 0,
        name=profile.get("name") or data.get("name"),
        email=profile.get("email") or data.get("email"),
        company=profile.get("company"),
        location=profile.get("location"),
    )
