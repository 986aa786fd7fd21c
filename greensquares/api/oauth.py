"""GitHub OAuth browser endpoints.

These are navigations, not XHR calls: failures are reported by redirecting
back to the frontend with an ``error`` query parameter.
"""

import logging
from typing import Annotated
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from greensquares.auth.oauth import (
    GitHubOAuth,
    InvalidStateError,
    OAuthError,
    OAuthStateStore,
    get_state_store,
)
from greensquares.auth.sessions import SessionStore, get_session_store
from greensquares.config import Settings, get_settings
from greensquares.utils.http_client import get_github_client
from greensquares.utils.metrics import metrics

router = APIRouter()
logger = logging.getLogger(__name__)


def get_oauth(
    settings: Annotated[Settings, Depends(get_settings)],
    http: Annotated[httpx.AsyncClient, Depends(get_github_client)],
    states: Annotated[OAuthStateStore, Depends(get_state_store)],
) -> GitHubOAuth:
    return GitHubOAuth(settings, http, states)


def _frontend_error(settings: Settings, error: str) -> RedirectResponse:
    metrics.oauth_logins_total.inc(outcome=error)
    return RedirectResponse(url=f"{settings.frontend_url}?error={error}", status_code=302)


@router.get("/github")
async def github_login(
    oauth: Annotated[GitHubOAuth, Depends(get_oauth)],
) -> RedirectResponse:
    """Initiate GitHub OAuth login."""
    return RedirectResponse(url=oauth.authorization_url(), status_code=302)


@router.get("/github/callback")
async def github_callback(
    oauth: Annotated[GitHubOAuth, Depends(get_oauth)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    code: str | None = None,
    state: str | None = None,
) -> RedirectResponse:
    """Handle GitHub OAuth callback and hand a session token to the frontend."""
    if not code:
        return _frontend_error(settings, "no_code")

    try:
        token, user = await oauth.complete(code, state)
    except InvalidStateError:
        logger.warning("OAuth callback with unknown or expired state")
        return _frontend_error(settings, "invalid_state")
    except OAuthError as e:
        logger.error(f"GitHub OAuth callback error: {e}")
        return _frontend_error(settings, "auth_failed")

    session_token = store.create(token, user)
    metrics.oauth_logins_total.inc(outcome="success")
    metrics.sessions_active.set(len(store))
    logger.info(f"User {user.get('login')} authenticated successfully")

    query = urlencode({"token": session_token, "user": user.get("login", "")})
    return RedirectResponse(url=f"{settings.frontend_url}/dashboard?{query}", status_code=302)
