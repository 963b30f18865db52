"""Pydantic models mirroring the GitHub Repositories API shape."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Owner(BaseModel):
    """Minimal GitHub-compatible account representation."""

    model_config = ConfigDict(populate_by_name=True)

    login: str
    id: int | None = None
    owner_type: str | None = Field(default=None, alias="type")


class Repository(BaseModel):
    """Repository as returned by the get, list and create endpoints.

    List endpoints return a reduced shape, so every feature flag is optional.
    """

    id: int
    name: str
    full_name: str
    owner: Owner
    description: str | None = None
    private: bool = False
    html_url: str | None = None
    homepage: str | None = None
    default_branch: str | None = None
    topics: list[str] = []
    has_wiki: bool | None = None
    has_downloads: bool | None = None
    has_projects: bool | None = None
    has_discussions: bool | None = None
    allow_auto_merge: bool | None = None
    allow_merge_commit: bool | None = None
    allow_rebase_merge: bool | None = None
    allow_squash_merge: bool | None = None
    delete_branch_on_merge: bool | None = None
    created_at: datetime


class PullRequest(BaseModel):
    """Open pull request, reduced to what the failed-build scan needs."""

    number: int
    title: str = ""
    head_sha: str

    @classmethod
    def from_api(cls, data: dict) -> PullRequest:
        return cls(
            number=data["number"],
            title=data.get("title") or "",
            head_sha=data["head"]["sha"],
        )


class CheckRun(BaseModel):
    """Single check run attached to a commit."""

    id: int | None = None
    name: str
    status: str
    conclusion: str | None = None


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RepositoryOptions(BaseModel):
    """Optional attributes applied when a repository is created.

    ``None`` means "leave GitHub's default".
    """

    model_config = ConfigDict(extra="forbid")

    description: str | None = None
    private: bool = False
    auto_init: bool | None = None
    homepage: str | None = None
    has_wiki: bool | None = None
    has_downloads: bool | None = None
    has_projects: bool | None = None
    has_discussions: bool | None = None
    allow_auto_merge: bool | None = None
    allow_merge_commit: bool | None = None
    allow_rebase_merge: bool | None = None
    allow_squash_merge: bool | None = None
    delete_branch_on_merge: bool | None = None


class CreateRepositoryRequest(RepositoryOptions):
    """Body of ``POST /user/repos`` and ``POST /orgs/{org}/repos``."""

    name: str

    def payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class UpdateRepositoryRequest(BaseModel):
    """Body of ``PATCH /repos/{owner}/{repo}``; only set fields are sent."""

    allow_auto_merge: bool | None = None
    has_discussions: bool | None = None

    def payload(self) -> dict:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Bulk operation results
# ---------------------------------------------------------------------------


class ToggleFailure(BaseModel):
    """One repository a bulk toggle could not update."""

    repository: str
    error: str


class BulkToggleResult(BaseModel):
    """Outcome of a best-effort toggle across an owner's repositories."""

    attempted: int = 0
    succeeded: int = 0
    failures: list[ToggleFailure] = []
