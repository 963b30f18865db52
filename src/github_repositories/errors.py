"""Exceptions raised by the GitHub client and the repositories service."""

from __future__ import annotations

import httpx


class RepositoryValidationError(ValueError):
    """Invalid input, detected before any request is sent."""


class GitHubAPIError(Exception):
    """GitHub answered with a non-success status code."""

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: list[dict] | None = None,
    ) -> None:
        super().__init__(f"GitHub API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class GitHubNotFoundError(GitHubAPIError):
    """The requested resource does not exist (or is not visible to the token)."""


class GitHubPermissionError(GitHubAPIError, PermissionError):
    """The token is missing or lacks the permission for this call."""


class RepositoryConflictError(GitHubAPIError):
    """A repository with the requested name already exists for the owner."""


def _is_name_conflict(errors: list[dict]) -> bool:
    for error in errors:
        if error.get("field") == "name" and "already exists" in str(
            error.get("message", "")
        ):
            return True
    return False


def raise_for_response(resp: httpx.Response) -> None:
    """Raise the matching :class:`GitHubAPIError` subclass for an error response.

    Successful responses pass through untouched.
    """
    if resp.is_success:
        return

    try:
        body = resp.json()
    except ValueError:
        body = {"message": (resp.text or "")[:300]}
    if not isinstance(body, dict):
        body = {"message": str(body)}

    message = body.get("message") or resp.reason_phrase
    errors = body.get("errors") or []

    if resp.status_code == 404:
        raise GitHubNotFoundError(resp.status_code, message, errors)
    if resp.status_code in (401, 403):
        raise GitHubPermissionError(resp.status_code, message, errors)
    if resp.status_code == 422 and _is_name_conflict(errors):
        raise RepositoryConflictError(resp.status_code, message, errors)
    raise GitHubAPIError(resp.status_code, message, errors)
