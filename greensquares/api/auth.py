"""Session management API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from greensquares.api.dependencies import get_user_github, upstream_error
from greensquares.auth import SessionStore, get_session_store, get_session_token
from greensquares.services.github import GitHubClient, GitHubError
from greensquares.utils.metrics import metrics

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/clear")
async def clear_session(
    token: Annotated[str | None, Depends(get_session_token)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> dict:
    """Drop the caller's session so they can re-authenticate with new scopes."""
    if token and store.delete(token):
        metrics.sessions_active.set(len(store))
        logger.info("Session cleared for re-authentication")

    return {
        "success": True,
        "message": "Session cleared. Please re-authenticate to get updated permissions.",
    }


@router.get("/validate")
async def validate_token(
    github: Annotated[GitHubClient, Depends(get_user_github)],
) -> dict:
    """Check the stored GitHub token still works and can reach repositories."""
    try:
        user = await github.get_authenticated_user()
        # Listing one repo is the cheapest probe of repository access
        await github.list_repositories(sort="", per_page=1)
    except GitHubError as e:
        logger.error(f"Token validation error: {e}")
        raise upstream_error(
            e,
            str(e) or "Token validation failed",
            token_valid=False,
            suggestion="Please re-authenticate to get proper permissions",
        ) from e

    return {
        "success": True,
        "token_valid": True,
        "user": user.get("login"),
        "scopes_available": True,
        "message": "Token is valid and has repository access",
    }
