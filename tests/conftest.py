"""Pytest configuration and fixtures."""

import json
import os
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Settings are read at import time of the app
os.environ.setdefault("GITHUB_CLIENT_ID", "test-client-id")
os.environ.setdefault("GITHUB_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("GITHUB_REDIRECT_URI", "http://localhost:3000/auth/github/callback")
os.environ.setdefault("FRONTEND_URL", "http://localhost:5173")
os.environ.setdefault("APP_ENV", "test")

from greensquares.auth import InMemorySessionStore, OAuthToken, get_session_store  # noqa: E402
from greensquares.auth.oauth import OAuthStateStore, get_state_store  # noqa: E402
from greensquares.main import app  # noqa: E402
from greensquares.utils.http_client import get_github_client  # noqa: E402

NOT_FOUND_BODY = {
    "message": "Not Found",
    "documentation_url": "https://docs.github.com/rest",
}


class FakeGitHub:
    """Stands in for github.com and api.github.com behind an httpx MockTransport.

    Routes are keyed by (method, path). Unregistered routes answer 404 the way
    GitHub does.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(
            (request.method, request.url.path), (404, NOT_FOUND_BODY)
        )
        return httpx.Response(status, json=body)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def sent_json(self, method: str, path: str) -> Any:
        """Body of the last request sent to (method, path)."""
        for request in reversed(self.requests):
            if request.method == method and request.url.path == path:
                return json.loads(request.content)
        raise AssertionError(f"No {method} {path} request was sent")

    def add_repository(
        self,
        owner: str,
        repo: str,
        branch: str = "main",
        head: str = "c0",
        base_tree: str = "r0",
    ) -> None:
        """Register everything the commit pipeline needs, succeeding at each step."""
        prefix = f"/repos/{owner}/{repo}"
        self.add("GET", prefix, {"name": repo, "default_branch": branch})
        self.add("GET", f"{prefix}/git/ref/heads/{branch}", {"object": {"sha": head}})
        self.add("GET", f"{prefix}/git/commits/{head}", {"sha": head, "tree": {"sha": base_tree}})
        self.add("POST", f"{prefix}/git/blobs", {"sha": "b1"}, status=201)
        self.add("POST", f"{prefix}/git/trees", {"sha": "r1"}, status=201)
        self.add(
            "POST",
            f"{prefix}/git/commits",
            {"sha": "c1", "author": {"name": "The Octocat", "email": "octocat@github.com"}},
            status=201,
        )
        self.add("PATCH", f"{prefix}/git/refs/heads/{branch}", {"object": {"sha": "c1"}})


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def state_store() -> OAuthStateStore:
    return OAuthStateStore()


@pytest.fixture
def credentials() -> OAuthToken:
    return OAuthToken(access_token="gho_testtoken", token_type="bearer", scope="repo")


@pytest.fixture
def session_token(session_store: InMemorySessionStore, credentials: OAuthToken) -> str:
    return session_store.create(credentials, {"login": "octocat", "id": 1})


@pytest_asyncio.fixture
async def client(
    github: FakeGitHub,
    session_store: InMemorySessionStore,
    state_store: OAuthStateStore,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an unauthenticated test client wired to the fake GitHub."""
    upstream = github.http_client()

    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_state_store] = lambda: state_store
    app.dependency_overrides[get_github_client] = lambda: upstream

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
    await upstream.aclose()


@pytest_asyncio.fixture
async def authenticated_client(
    client: AsyncClient, session_token: str
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client carrying a valid session token."""
    client.headers["Authorization"] = f"Bearer {session_token}"
    yield client
