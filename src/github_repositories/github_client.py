"""Thin wrapper over the GitHub REST API for repository operations."""

import httpx

from .errors import raise_for_response
from .models import CreateRepositoryRequest, UpdateRepositoryRequest


class GitHubClient:
    """GitHub API client bound to a pooled ``httpx.AsyncClient``.

    The HTTP client is owned by whoever created it (normally
    :class:`~github_repositories.provider.GitHubClientProvider`); this
    wrapper never closes it.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def get_repo(self, owner: str, repo: str) -> dict:
        """GET /repos/{owner}/{repo}."""
        resp = await self._http.get(f"/repos/{owner}/{repo}")
        raise_for_response(resp)
        return resp.json()

    async def list_user_repos(
        self, owner: str, page: int = 1, per_page: int = 100
    ) -> list[dict]:
        """GET /users/{owner}/repos -- one page of an owner's repositories."""
        resp = await self._http.get(
            f"/users/{owner}/repos",
            params={"page": page, "per_page": per_page},
        )
        raise_for_response(resp)
        return resp.json()

    async def create_user_repo(self, request: CreateRepositoryRequest) -> dict:
        """Create a new repo for the authenticated user (POST /user/repos)."""
        resp = await self._http.post("/user/repos", json=request.payload())
        raise_for_response(resp)
        return resp.json()

    async def create_org_repo(
        self, org: str, request: CreateRepositoryRequest
    ) -> dict:
        """Create a new repo in an organization (POST /orgs/{org}/repos)."""
        resp = await self._http.post(f"/orgs/{org}/repos", json=request.payload())
        raise_for_response(resp)
        return resp.json()

    async def replace_topics(self, owner: str, repo: str, names: list[str]) -> list[str]:
        """PUT /repos/{owner}/{repo}/topics -- overwrite the full topic set."""
        resp = await self._http.put(
            f"/repos/{owner}/{repo}/topics", json={"names": names}
        )
        raise_for_response(resp)
        return resp.json().get("names", [])

    async def delete_repo(self, owner: str, repo: str) -> None:
        """DELETE /repos/{owner}/{repo}."""
        resp = await self._http.delete(f"/repos/{owner}/{repo}")
        raise_for_response(resp)

    async def update_repo(
        self, owner: str, repo: str, request: UpdateRepositoryRequest
    ) -> dict:
        """PATCH /repos/{owner}/{repo} with only the fields set on *request*."""
        resp = await self._http.patch(
            f"/repos/{owner}/{repo}", json=request.payload()
        )
        raise_for_response(resp)
        return resp.json()

    async def list_pulls(
        self, owner: str, repo: str, page: int = 1, per_page: int = 100
    ) -> list[dict]:
        """GET /repos/{owner}/{repo}/pulls -- one page of open pull requests."""
        resp = await self._http.get(
            f"/repos/{owner}/{repo}/pulls",
            params={"state": "open", "page": page, "per_page": per_page},
        )
        raise_for_response(resp)
        return resp.json()

    async def list_check_runs(
        self, owner: str, repo: str, ref: str, page: int = 1, per_page: int = 100
    ) -> list[dict]:
        """GET /repos/{owner}/{repo}/commits/{ref}/check-runs -- one page of runs."""
        resp = await self._http.get(
            f"/repos/{owner}/{repo}/commits/{ref}/check-runs",
            params={"page": page, "per_page": per_page},
        )
        raise_for_response(resp)
        return resp.json().get("check_runs", [])
