"""Authentication module."""

from greensquares.auth.dependencies import get_current_session, get_session_token
from greensquares.auth.models import OAuthToken
from greensquares.auth.sessions import (
    InMemorySessionStore,
    Session,
    SessionStore,
    get_session_store,
)

__all__ = [
    "get_current_session",
    "get_session_store",
    "get_session_token",
    "InMemorySessionStore",
    "OAuthToken",
    "Session",
    "SessionStore",
]
