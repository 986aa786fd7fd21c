"""GitHub integration module.

Provides the REST gateway used by the API routes and the quick-commit
pipeline built on GitHub's Git data API.

Usage:
    from greensquares.services.github import CommitBuilder, CommitRequest, GitHubClient

    client = GitHubClient(http, token=session.credentials)
    result = await CommitBuilder(client).build(
        CommitRequest(owner="octocat", repo="notes", message="Add notes", path="notes.md")
    )
"""

from greensquares.services.github.client import (
    GitHubAPIError,
    GitHubClient,
    GitHubConnectionError,
    GitHubError,
    shape_profile,
    shape_repository,
)
from greensquares.services.github.commit import (
    CommitBuilder,
    CommitError,
    CommitFailureReason,
    CommitRequest,
    CommitResult,
    CommitStage,
)

__all__ = [
    # Client
    "GitHubAPIError",
    "GitHubClient",
    "GitHubConnectionError",
    "GitHubError",
    "shape_profile",
    "shape_repository",
    # Commits
    "CommitBuilder",
    "CommitError",
    "CommitFailureReason",
    "CommitRequest",
    "CommitResult",
    "CommitStage",
]
