"""Repository endpoints a host application can mount with ``include_router``."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..deps import get_repositories_service
from ..errors import (
    GitHubAPIError,
    GitHubNotFoundError,
    GitHubPermissionError,
    RepositoryConflictError,
    RepositoryValidationError,
)
from ..models import BulkToggleResult, Repository, RepositoryOptions
from ..service import RepositoriesService

router = APIRouter(prefix="/repositories", tags=["repositories"])


class CreateRepositoryBody(RepositoryOptions):
    name: str
    org: str | None = None
    unique: bool = False


class CreateRepositoryResponse(BaseModel):
    name: str
    repository: Repository | None = None


class ReplaceTopicsRequest(BaseModel):
    names: list[str]


class ToggleRequest(BaseModel):
    enable: bool


class DeleteResponse(BaseModel):
    deleted: bool


@contextmanager
def _github_errors() -> Iterator[None]:
    """Translate service exceptions into HTTP errors."""
    try:
        yield
    except RepositoryValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RepositoryConflictError as exc:
        raise HTTPException(status_code=409, detail=exc.message) from exc
    except GitHubPermissionError as exc:
        raise HTTPException(status_code=403, detail=exc.message) from exc
    except GitHubNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except GitHubAPIError as exc:
        raise HTTPException(
            status_code=502,
            detail=f"GitHub API error {exc.status_code}: {exc.message}",
        ) from exc
    except httpx.TimeoutException as exc:
        raise HTTPException(
            status_code=504, detail=f"GitHub API timed out: {exc}"
        ) from exc
    except httpx.TransportError as exc:
        raise HTTPException(
            status_code=502, detail=f"GitHub API unreachable: {exc}"
        ) from exc


@router.post("", status_code=201)
async def create_repository(
    body: CreateRepositoryBody,
    service: RepositoriesService = Depends(get_repositories_service),
) -> CreateRepositoryResponse:
    """Create a repository for the token's user, or inside ``org``."""
    options = body.model_dump(exclude={"name", "org", "unique"}, exclude_none=True)
    with _github_errors():
        if body.unique:
            name = await service.create_unique(body.name, org=body.org, **options)
            return CreateRepositoryResponse(name=name)
        if body.org is None:
            repo = await service.create(body.name, **options)
        else:
            repo = await service.create_for_org(body.org, body.name, **options)
    return CreateRepositoryResponse(name=repo.name, repository=repo)


@router.get("/{owner}")
async def list_repositories(
    owner: str,
    start_at: datetime | None = Query(default=None),
    end_at: datetime | None = Query(default=None),
    service: RepositoriesService = Depends(get_repositories_service),
) -> list[Repository]:
    """List an owner's repositories, optionally by creation window."""
    with _github_errors():
        return await service.get_all_for_owner(owner, start_at, end_at)


@router.get("/{owner}/{name}")
async def get_repository(
    owner: str,
    name: str,
    service: RepositoriesService = Depends(get_repositories_service),
) -> Repository:
    """Get a repository by owner and name."""
    with _github_errors():
        repo = await service.get_by_name(owner, name)
    if repo is None:
        raise HTTPException(
            status_code=404, detail=f"Repository {owner}/{name} not found"
        )
    return repo


@router.delete("/{owner}/{name}")
async def delete_repository(
    owner: str,
    name: str,
    service: RepositoriesService = Depends(get_repositories_service),
) -> DeleteResponse:
    """Delete a repository if it exists."""
    with _github_errors():
        deleted = await service.delete_if_exists(owner, name)
    return DeleteResponse(deleted=deleted)


@router.put("/{owner}/{name}/topics", status_code=204)
async def replace_topics(
    owner: str,
    name: str,
    req: ReplaceTopicsRequest,
    service: RepositoriesService = Depends(get_repositories_service),
) -> None:
    """Replace the full topic set; an empty list is ignored."""
    with _github_errors():
        await service.replace_topics(owner, name, req.names)


@router.put("/{owner}/{name}/auto-merge", status_code=204)
async def toggle_auto_merge(
    owner: str,
    name: str,
    req: ToggleRequest,
    service: RepositoriesService = Depends(get_repositories_service),
) -> None:
    with _github_errors():
        await service.toggle_auto_merge(owner, name, req.enable)


@router.put("/{owner}/{name}/discussions", status_code=204)
async def toggle_discussions(
    owner: str,
    name: str,
    req: ToggleRequest,
    service: RepositoriesService = Depends(get_repositories_service),
) -> None:
    with _github_errors():
        await service.toggle_discussions(owner, name, req.enable)


# ---------------------------------------------------------------------------
# Owner-wide operations
# ---------------------------------------------------------------------------


@router.post("/{owner}/bulk/auto-merge")
async def toggle_auto_merge_on_all(
    owner: str,
    req: ToggleRequest,
    start_at: datetime | None = Query(default=None),
    end_at: datetime | None = Query(default=None),
    service: RepositoriesService = Depends(get_repositories_service),
) -> BulkToggleResult:
    """Toggle auto-merge on every repository; per-repo failures are reported."""
    with _github_errors():
        return await service.toggle_auto_merge_on_all_repos(
            owner, req.enable, start_at, end_at
        )


@router.post("/{owner}/bulk/discussions")
async def toggle_discussions_on_all(
    owner: str,
    req: ToggleRequest,
    start_at: datetime | None = Query(default=None),
    end_at: datetime | None = Query(default=None),
    service: RepositoriesService = Depends(get_repositories_service),
) -> BulkToggleResult:
    """Toggle discussions on every repository; per-repo failures are reported."""
    with _github_errors():
        return await service.toggle_discussions_on_all_repos(
            owner, req.enable, start_at, end_at
        )


@router.get("/{owner}/bulk/failed-builds")
async def list_failed_builds(
    owner: str,
    start_at: datetime | None = Query(default=None),
    end_at: datetime | None = Query(default=None),
    service: RepositoriesService = Depends(get_repositories_service),
) -> list[Repository]:
    """Repositories with an open pull request whose checks failed."""
    with _github_errors():
        return await service.get_all_with_failed_builds(owner, start_at, end_at)
