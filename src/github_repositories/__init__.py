from .config import Settings
from .errors import (
    GitHubAPIError,
    GitHubNotFoundError,
    GitHubPermissionError,
    RepositoryConflictError,
    RepositoryValidationError,
)
from .github_client import GitHubClient
from .models import BulkToggleResult, CreateRepositoryRequest, Repository
from .provider import GitHubClientProvider
from .service import RepositoriesService

__all__ = [
    "BulkToggleResult",
    "CreateRepositoryRequest",
    "GitHubAPIError",
    "GitHubClient",
    "GitHubClientProvider",
    "GitHubNotFoundError",
    "GitHubPermissionError",
    "RepositoriesService",
    "Repository",
    "RepositoryConflictError",
    "RepositoryValidationError",
    "Settings",
]
