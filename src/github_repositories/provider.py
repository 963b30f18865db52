"""Hands out authenticated :class:`GitHubClient` handles over one connection pool."""

import logging

import httpx

from .config import Settings
from .github_client import GitHubClient

logger = logging.getLogger(__name__)


class GitHubClientProvider:
    """Owns the shared ``httpx.AsyncClient`` and builds clients on demand.

    Callers acquire a fresh :class:`GitHubClient` for every operation via
    :meth:`get` and never keep it; pooling and authentication live here.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.settings.api_version,
        }
        if self.settings.github_token:
            headers["Authorization"] = f"Bearer {self.settings.github_token}"
        else:
            logger.warning("No GitHub token configured; requests are unauthenticated")
        return headers

    async def get(self) -> GitHubClient:
        """Return a ready-to-use client, opening the connection pool if needed."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                base_url=self.settings.api_url,
                headers=self._headers(),
                timeout=self.settings.request_timeout,
                transport=self._transport,
            )
        return GitHubClient(self._http)

    async def aclose(self) -> None:
        """Close the connection pool. A later :meth:`get` reopens it."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
