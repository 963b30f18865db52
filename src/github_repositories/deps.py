"""FastAPI dependency injection helpers.

Provides cached singletons for the settings, the client provider and the
repositories service, plus a per-request service for hosts that want one.
"""

from functools import lru_cache

from fastapi import Depends

from .config import Settings
from .provider import GitHubClientProvider
from .service import RepositoriesService


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings singleton."""
    return Settings()


@lru_cache
def get_client_provider() -> GitHubClientProvider:
    """Return the shared client provider (one connection pool per process)."""
    return GitHubClientProvider(get_settings())


@lru_cache
def get_repositories_service() -> RepositoriesService:
    """Return the shared repositories service instance."""
    return RepositoriesService(get_client_provider())


def get_scoped_repositories_service(
    provider: GitHubClientProvider = Depends(get_client_provider),
) -> RepositoriesService:
    """Return a new repositories service for the current request."""
    return RepositoriesService(provider)
