"""Repository API endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from greensquares.api.dependencies import get_user_github, upstream_error
from greensquares.errors import APIError
from greensquares.services.github import (
    CommitBuilder,
    CommitError,
    CommitRequest,
    GitHubClient,
    GitHubError,
    shape_repository,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class CommitPayload(BaseModel):
    """Schema for a quick commit. ``message`` and ``path`` are checked by the route."""

    message: str | None = None
    path: str | None = None
    content: str | None = None


@router.get("")
async def list_repositories(
    github: Annotated[GitHubClient, Depends(get_user_github)],
) -> dict:
    """List the caller's most recently updated repositories."""
    try:
        repos = await github.list_repositories()
    except GitHubError as e:
        logger.error(f"Repositories fetch error: {e}")
        raise upstream_error(e, "Failed to fetch repositories") from e

    return {"success": True, "repositories": [shape_repository(repo) for repo in repos]}


@router.get("/{owner}/{repo}/contents")
async def get_repository_contents(
    owner: str,
    repo: str,
    github: Annotated[GitHubClient, Depends(get_user_github)],
    path: str = "",
) -> dict:
    """Proxy GitHub's contents API for a file or directory."""
    try:
        contents: Any = await github.get_contents(owner, repo, path)
    except GitHubError as e:
        logger.error(f"Repository contents fetch error for {owner}/{repo}: {e}")
        raise upstream_error(e, "Failed to fetch repository contents") from e

    return {"success": True, "contents": contents}


@router.post("/{owner}/{repo}/commit")
async def create_commit(
    owner: str,
    repo: str,
    payload: CommitPayload,
    github: Annotated[GitHubClient, Depends(get_user_github)],
) -> dict:
    """Commit one file to the repository's default branch."""
    if not payload.message or not payload.path:
        raise APIError(400, "Message and path are required")

    request = CommitRequest(
        owner=owner,
        repo=repo,
        message=payload.message,
        path=payload.path,
        content=payload.content,
    )

    try:
        result = await CommitBuilder(github).build(request)
    except CommitError as e:
        raise APIError(
            e.status_code,
            e.message,
            reason=e.reason.value,
            stage=e.stage.value,
            details=e.details,
            documentation_url=e.documentation_url,
        ) from e

    return {
        "success": True,
        "commit": {
            "sha": result.sha,
            "message": result.message,
            "html_url": result.html_url,
            "author": result.author,
        },
    }
