"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, Request

from greensquares.auth.sessions import Session, SessionStore, get_session_store
from greensquares.errors import APIError

BEARER_PREFIX = "Bearer "


def get_session_token(request: Request) -> str | None:
    """Extract the session token from an ``Authorization: Bearer`` header."""
    header = request.headers.get("Authorization", "")
    token = header.removeprefix(BEARER_PREFIX).strip()
    return token or None


async def get_current_session(
    token: Annotated[str | None, Depends(get_session_token)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> Session:
    """Get the current session, raising 401 if not authenticated."""
    if not token:
        raise APIError(401, "No session token provided")

    session = store.get(token)
    if session is None:
        raise APIError(401, "Invalid session token")
    return session
