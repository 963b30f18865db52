"""Repository operations facade over the GitHub REST API.

Every public method acquires a fresh client from the provider, performs one
or more calls and returns plain models. Nothing is cached between calls.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from .config import Settings
from .errors import (
    GitHubNotFoundError,
    RepositoryConflictError,
    RepositoryValidationError,
)
from .models import (
    BulkToggleResult,
    CheckRun,
    CreateRepositoryRequest,
    PullRequest,
    Repository,
    ToggleFailure,
    UpdateRepositoryRequest,
)
from .github_client import GitHubClient
from .provider import GitHubClientProvider

logger = logging.getLogger(__name__)

FAILED_CONCLUSIONS = frozenset({"failure", "timed_out", "startup_failure"})


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with API timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _require(value: str | None, what: str) -> None:
    if value is None or not value.strip():
        raise RepositoryValidationError(f"{what} must not be empty")


def in_window(
    repo: Repository,
    start_at: datetime | None = None,
    end_at: datetime | None = None,
) -> bool:
    """Whether *repo* was created inside ``[start_at, end_at]`` (both inclusive)."""
    created = _as_utc(repo.created_at)
    if start_at is not None and created < _as_utc(start_at):
        return False
    if end_at is not None and created > _as_utc(end_at):
        return False
    return True


class RepositoriesService:
    """Repository lifecycle operations for users and organizations."""

    def __init__(
        self,
        provider: GitHubClientProvider,
        settings: Settings | None = None,
    ) -> None:
        self.provider = provider
        self.settings = settings or provider.settings

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create(self, name: str, **options) -> Repository:
        """Create a repository for the authenticated user.

        *options* are the fields of :class:`~github_repositories.models.RepositoryOptions`.
        """
        _require(name, "Repository name")
        logger.info(
            "Creating user repository: %s, private: %s",
            name,
            options.get("private", False),
        )
        return await self.create_from_request(
            CreateRepositoryRequest(name=name, **options)
        )

    async def create_for_org(self, org: str, name: str, **options) -> Repository:
        """Create a repository inside organization *org*."""
        _require(org, "Organization")
        _require(name, "Repository name")
        logger.info(
            "Creating org repository: %s/%s, private: %s",
            org,
            name,
            options.get("private", False),
        )
        return await self.create_from_request(
            CreateRepositoryRequest(name=name, **options), org=org
        )

    async def create_from_request(
        self, request: CreateRepositoryRequest, org: str | None = None
    ) -> Repository:
        """Send a prepared creation request, for the user or for *org*."""
        _require(request.name, "Repository name")
        client = await self.provider.get()
        if org is None:
            logger.debug("Sending user repository creation request for: %s", request.name)
            data = await client.create_user_repo(request)
        else:
            _require(org, "Organization")
            logger.debug(
                "Sending org repository creation request for: %s/%s", org, request.name
            )
            data = await client.create_org_repo(org, request)
        return Repository.model_validate(data)

    async def create_unique(
        self,
        base_name: str,
        org: str | None = None,
        max_attempts: int | None = None,
        **options,
    ) -> str:
        """Create a repository named *base_name*, or the first free ``base_name-N``.

        Only name conflicts trigger another attempt. After *max_attempts*
        (default ``Settings.unique_name_max_attempts``) the last
        :class:`RepositoryConflictError` is raised. A bound below one is a
        :class:`RepositoryValidationError`.

        Returns:
            The name GitHub accepted.
        """
        _require(base_name, "Repository name")
        attempts = (
            self.settings.unique_name_max_attempts
            if max_attempts is None
            else max_attempts
        )
        if attempts < 1:
            raise RepositoryValidationError(
                f"max_attempts must be at least 1, got {attempts}"
            )

        names = [base_name] + [f"{base_name}-{n}" for n in range(1, attempts)]
        for name in names[:-1]:
            try:
                repo = await self.create_from_request(
                    CreateRepositoryRequest(name=name, **options), org=org
                )
            except RepositoryConflictError:
                logger.info("Repository name %s is taken, trying next suffix", name)
                continue
            logger.info("Created repository with unique name: %s", repo.name)
            return repo.name

        try:
            repo = await self.create_from_request(
                CreateRepositoryRequest(name=names[-1], **options), org=org
            )
        except RepositoryConflictError:
            logger.warning(
                "Gave up finding a free name for %s after %d attempts",
                base_name,
                attempts,
            )
            raise
        logger.info("Created repository with unique name: %s", repo.name)
        return repo.name

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def get_by_name(self, owner: str, name: str) -> Repository | None:
        """Fetch one repository; ``None`` when GitHub reports it does not exist.

        Other failures (permissions, server errors, transport errors) are
        raised rather than reported as absence.
        """
        logger.debug("Fetching repository: %s/%s", owner, name)
        client = await self.provider.get()
        try:
            data = await client.get_repo(owner, name)
        except GitHubNotFoundError:
            logger.warning("Repository not found: %s/%s", owner, name)
            return None
        return Repository.model_validate(data)

    async def does_exist(self, owner: str, name: str) -> bool:
        """Whether *owner*/*name* exists."""
        exists = await self.get_by_name(owner, name) is not None
        logger.debug("Checked existence of %s/%s: %s", owner, name, exists)
        return exists

    async def get_all_for_owner(
        self,
        owner: str,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[Repository]:
        """List every repository of *owner*, optionally by creation window.

        Pages are fetched until one comes back empty. *cancel_event* is
        checked between pages only; when it is set the repositories gathered
        so far are returned.
        """
        logger.info(
            "Getting all repositories for owner: %s, start: %s, end: %s",
            owner,
            start_at,
            end_at,
        )
        client = await self.provider.get()

        repositories: list[Repository] = []
        page = 1
        while True:
            batch = await client.list_user_repos(
                owner, page=page, per_page=self.settings.per_page
            )
            for item in batch:
                repo = Repository.model_validate(item)
                if in_window(repo, start_at, end_at):
                    repositories.append(repo)

            if not batch:
                break
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Listing for %s cancelled after page %d", owner, page)
                break
            page += 1

        logger.info("Fetched %d repositories for %s", len(repositories), owner)
        return repositories

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    async def replace_topics(
        self, owner: str, name: str, topics: list[str] | None
    ) -> None:
        """Overwrite the topics of *owner*/*name* with exactly *topics*.

        An empty or missing list does nothing, so a stray call cannot wipe
        every topic.
        """
        if not topics:
            logger.warning("No topics provided for replacement in: %s/%s", owner, name)
            return

        logger.info("Replacing topics for repository: %s/%s", owner, name)
        client = await self.provider.get()
        await client.replace_topics(owner, name, list(topics))

    async def delete_if_exists(self, owner: str, name: str) -> bool:
        """Delete *owner*/*name* if present.

        Returns:
            ``True`` if a delete request was sent.
        """
        name = name.lower()
        if not await self.does_exist(owner, name):
            logger.info("Repository does not exist: %s/%s", owner, name)
            return False

        logger.info("Deleting repository: %s/%s", owner, name)
        client = await self.provider.get()
        await client.delete_repo(owner, name)
        return True

    async def toggle_auto_merge(self, owner: str, name: str, enable: bool) -> None:
        """Set only the auto-merge flag of *owner*/*name*."""
        logger.info("Toggling auto-merge for %s/%s: %s", owner, name, enable)
        client = await self.provider.get()
        await client.update_repo(
            owner, name, UpdateRepositoryRequest(allow_auto_merge=enable)
        )

    async def toggle_discussions(self, owner: str, name: str, enable: bool) -> None:
        """Set only the discussions flag of *owner*/*name*."""
        logger.info("Toggling discussions for %s/%s: %s", owner, name, enable)
        client = await self.provider.get()
        await client.update_repo(
            owner, name, UpdateRepositoryRequest(has_discussions=enable)
        )

    async def toggle_auto_merge_on_all_repos(
        self,
        owner: str,
        enable: bool,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BulkToggleResult:
        """Best-effort :meth:`toggle_auto_merge` on every listed repository."""
        return await self._toggle_all(
            "auto-merge",
            self.toggle_auto_merge,
            owner,
            enable,
            start_at,
            end_at,
            cancel_event,
        )

    async def toggle_discussions_on_all_repos(
        self,
        owner: str,
        enable: bool,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BulkToggleResult:
        """Best-effort :meth:`toggle_discussions` on every listed repository."""
        return await self._toggle_all(
            "discussions",
            self.toggle_discussions,
            owner,
            enable,
            start_at,
            end_at,
            cancel_event,
        )

    async def _toggle_all(
        self,
        feature: str,
        toggle: Callable[[str, str, bool], Awaitable[None]],
        owner: str,
        enable: bool,
        start_at: datetime | None,
        end_at: datetime | None,
        cancel_event: asyncio.Event | None,
    ) -> BulkToggleResult:
        """Apply *toggle* to each repository in turn.

        A failure on one repository is logged and recorded, and the loop
        moves on to the next one.
        """
        logger.info(
            "Toggling %s on all repositories for %s. Enable: %s", feature, owner, enable
        )
        repositories = await self.get_all_for_owner(
            owner, start_at, end_at, cancel_event
        )
        result = BulkToggleResult()
        if not repositories:
            logger.warning("No repositories found for %s toggle: %s", feature, owner)
            return result

        for repo in repositories:
            result.attempted += 1
            try:
                await toggle(owner, repo.name, enable)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Failed to toggle %s on %s: %s", feature, repo.name, exc)
                result.failures.append(ToggleFailure(repository=repo.name, error=str(exc)))
            else:
                result.succeeded += 1

        if result.failures:
            logger.warning(
                "Toggled %s on %d of %d repositories for %s",
                feature,
                result.succeeded,
                result.attempted,
                owner,
            )
        return result

    # ------------------------------------------------------------------
    # Build status
    # ------------------------------------------------------------------

    async def get_all_with_failed_builds(
        self,
        owner: str,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
    ) -> list[Repository]:
        """Repositories with at least one open pull request whose checks failed."""
        repositories = await self.get_all_for_owner(owner, start_at, end_at)
        failed: list[Repository] = []
        for repo in repositories:
            try:
                if await self._has_failed_build(owner, repo.name):
                    failed.append(repo)
            except GitHubNotFoundError:
                logger.warning("Repository disappeared during scan: %s/%s", owner, repo.name)

        logger.info(
            "Found %d repositories with failed builds for %s", len(failed), owner
        )
        return failed

    async def _has_failed_build(self, owner: str, name: str) -> bool:
        client = await self.provider.get()
        page = 1
        while True:
            batch = await client.list_pulls(
                owner, name, page=page, per_page=self.settings.per_page
            )
            if not batch:
                return False
            for item in batch:
                pull = PullRequest.from_api(item)
                if await self._head_failed(client, owner, name, pull):
                    return True
            page += 1

    async def _head_failed(
        self, client: GitHubClient, owner: str, name: str, pull: PullRequest
    ) -> bool:
        """Page through the check runs of *pull*'s head commit."""
        page = 1
        while True:
            runs = await client.list_check_runs(
                owner, name, pull.head_sha, page=page, per_page=self.settings.per_page
            )
            if not runs:
                return False
            for run in runs:
                check = CheckRun.model_validate(run)
                if check.conclusion in FAILED_CONCLUSIONS:
                    logger.debug(
                        "Failed check %s on %s/%s#%d",
                        check.name,
                        owner,
                        name,
                        pull.number,
                    )
                    return True
            page += 1
