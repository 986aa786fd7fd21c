"""GitHub OAuth authorization-code flow.

Two transitions:

1. ``authorization_url()`` builds the GitHub authorize URL and records a
   fresh anti-forgery ``state`` value.
2. ``complete(code, state)`` checks the state, exchanges the code for an
   access token and fetches the user's profile with it.

Session creation and redirects are left to the route handlers.
"""

import logging
import secrets
import time
from typing import Any
from urllib.parse import urlencode

import httpx

from greensquares.auth.models import OAuthToken
from greensquares.config import Settings
from greensquares.constants import (
    GITHUB_AUTHORIZE_URL,
    GITHUB_TOKEN_URL,
    OAUTH_PROMPT,
    OAUTH_SCOPE,
    OAUTH_STATE_TTL_SECONDS,
)
from greensquares.services.github.client import GitHubClient, GitHubError

logger = logging.getLogger(__name__)


class OAuthError(Exception):
    """The code exchange did not produce usable credentials."""

    pass


class InvalidStateError(OAuthError):
    """The callback's state was never issued, already used, or expired."""

    pass


class OAuthStateStore:
    """Pending authorization flows, keyed by their ``state`` value.

    Each state is single use and expires after ``ttl_seconds``.
    """

    def __init__(self, ttl_seconds: float = OAUTH_STATE_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._issued: dict[str, float] = {}

    def issue(self) -> str:
        self._purge_expired()
        state = secrets.token_urlsafe(16)
        self._issued[state] = time.monotonic()
        return state

    def consume(self, state: str | None) -> bool:
        """Return True if ``state`` was pending, removing it either way."""
        if not state:
            return False
        issued_at = self._issued.pop(state, None)
        if issued_at is None:
            return False
        return time.monotonic() - issued_at <= self.ttl_seconds

    def _purge_expired(self) -> None:
        cutoff = time.monotonic() - self.ttl_seconds
        for state in [s for s, issued_at in self._issued.items() if issued_at < cutoff]:
            del self._issued[state]

    def __len__(self) -> int:
        return len(self._issued)


state_store = OAuthStateStore()


def get_state_store() -> OAuthStateStore:
    """FastAPI dependency returning the process-wide pending-state store."""
    return state_store


class GitHubOAuth:
    """Drives the GitHub OAuth flow for one request."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient, states: OAuthStateStore):
        self.settings = settings
        self.http = http
        self.states = states

    def authorization_url(self) -> str:
        params = {
            "client_id": self.settings.github_client_id,
            "redirect_uri": self.settings.github_redirect_uri,
            "scope": OAUTH_SCOPE,
            # Forces the consent screen so newly added scopes get approved
            "prompt": OAUTH_PROMPT,
            "state": self.states.issue(),
        }
        return f"{GITHUB_AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> OAuthToken:
        """Exchange an authorization code for an access token.

        Raises:
            OAuthError: If GitHub rejects the code or returns no token
        """
        try:
            response = await self.http.post(
                GITHUB_TOKEN_URL,
                json={
                    "client_id": self.settings.github_client_id,
                    "client_secret": self.settings.github_client_secret,
                    "code": code,
                    "redirect_uri": self.settings.github_redirect_uri,
                },
                headers={"Accept": "application/json"},
            )
        except httpx.TransportError as e:
            raise OAuthError(f"Token exchange failed: {e}") from e

        if response.status_code != 200:
            raise OAuthError(f"Token exchange returned {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            raise OAuthError("Token exchange returned a non-JSON body") from e
        if not isinstance(result, dict):
            raise OAuthError("Token exchange returned an unexpected body")

        # GitHub reports bad codes as 200 with an error body
        if "error" in result:
            raise OAuthError(result.get("error_description") or result["error"])
        if not result.get("access_token"):
            raise OAuthError("No access token received")

        return OAuthToken(
            access_token=result["access_token"],
            token_type=result.get("token_type") or "bearer",
            scope=result.get("scope"),
        )

    async def complete(self, code: str, state: str | None) -> tuple[OAuthToken, dict[str, Any]]:
        """Finish the flow: verify state, exchange the code, fetch the user.

        Raises:
            InvalidStateError: If ``state`` is not a pending flow
            OAuthError: If the exchange or the profile fetch fails
        """
        if not self.states.consume(state):
            raise InvalidStateError("Unknown or expired OAuth state")

        token = await self.exchange_code(code)

        try:
            user = await GitHubClient(self.http, token=token).get_authenticated_user()
        except GitHubError as e:
            raise OAuthError(f"Failed to fetch user profile: {e}") from e

        return token, user
