"""Settings loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """GitHub repositories settings.

    All fields can be overridden via environment variables
    with the ``GITHUB_REPOSITORIES_`` prefix
    (e.g. ``GITHUB_REPOSITORIES_GITHUB_TOKEN=ghp_...``).
    """

    github_token: str | None = None
    api_url: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    per_page: int = Field(default=100, ge=1, le=100)
    request_timeout: float = 30.0
    unique_name_max_attempts: int = Field(default=10, ge=1)

    model_config = SettingsConfigDict(env_prefix="GITHUB_REPOSITORIES_")
