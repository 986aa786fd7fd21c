"""Session store mapping opaque session tokens to GitHub credentials.

The frontend never sees the GitHub access token. It holds a session token
instead, which is exchanged for the stored credentials on every request.

Sessions live in process memory only: they never expire and a restart wipes
them all.
"""

import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from greensquares.auth.models import OAuthToken
from greensquares.constants import SESSION_TOKEN_BYTES


@dataclass
class Session:
    """Credentials and cached user snapshot behind a session token."""

    credentials: OAuthToken
    user: dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def login(self) -> str | None:
        return self.user.get("login")


class SessionStore(Protocol):
    """Keyed session storage. Unknown tokens are a normal ``None`` result."""

    def create(self, credentials: OAuthToken, user: dict[str, Any]) -> str: ...

    def get(self, token: str) -> Session | None: ...

    def delete(self, token: str) -> bool: ...

    def __len__(self) -> int: ...


class InMemorySessionStore:
    """Default session store backed by a dict.

    Only touched from the event loop thread, so no locking is needed.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def create(self, credentials: OAuthToken, user: dict[str, Any]) -> str:
        # No collision check; 24 random bytes make one negligible
        token = secrets.token_urlsafe(SESSION_TOKEN_BYTES)
        self._sessions[token] = Session(credentials=credentials, user=user)
        return token

    def get(self, token: str) -> Session | None:
        return self._sessions.get(token)

    def delete(self, token: str) -> bool:
        return self._sessions.pop(token, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


session_store = InMemorySessionStore()


def get_session_store() -> SessionStore:
    """FastAPI dependency returning the process-wide session store."""
    return session_store
