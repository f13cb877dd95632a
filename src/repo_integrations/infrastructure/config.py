"""Package configuration — loaded from environment variables."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_token: SecretStr | None = None
    github_api_url: str = "https://api.github.com"
    user_agent: str = "repo-integrations/1.0"
    request_timeout: float = 30.0

    courtesy_delay_seconds: float = 1.0
    rate_limit_threshold: float = 0.15

    issues_state: str = "open"
    issues_labels: str = "help wanted"
    issues_per_page: int = 10
    issues_since: str | None = None
    contributors_per_page: int = 10
    contributors_anon: bool = False

    max_concurrent_repositories: int = 4
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings (cached after first call)."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Install the package's root logging format at the configured level."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
