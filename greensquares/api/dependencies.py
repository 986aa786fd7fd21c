"""Shared dependencies for API endpoints."""

from typing import Annotated

import httpx
from fastapi import Depends

from greensquares.auth import Session, get_current_session
from greensquares.errors import APIError
from greensquares.services.github import GitHubClient, GitHubError
from greensquares.utils.http_client import get_github_client


def get_user_github(
    session: Annotated[Session, Depends(get_current_session)],
    http: Annotated[httpx.AsyncClient, Depends(get_github_client)],
) -> GitHubClient:
    """GitHub client acting with the session owner's credentials."""
    return GitHubClient(http, token=session.credentials)


def get_anonymous_github(
    http: Annotated[httpx.AsyncClient, Depends(get_github_client)],
) -> GitHubClient:
    """GitHub client for public, unauthenticated calls."""
    return GitHubClient(http)


def upstream_error(error: GitHubError, message: str, **extra) -> APIError:
    """Pass an upstream failure through with its status and message.

    Transport failures have no upstream status and become 500s.
    """
    return APIError(error.status_code or 500, message, details=str(error), **extra)
