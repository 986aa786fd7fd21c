"""Tests for the GitHub OAuth browser flow."""

from urllib.parse import parse_qs, urlparse

import pytest
from httpx import AsyncClient

from greensquares.auth import InMemorySessionStore
from greensquares.auth.oauth import OAuthStateStore
from greensquares.utils.metrics import metrics

FRONTEND = "http://localhost:5173"


async def start_login(client: AsyncClient) -> dict[str, list[str]]:
    response = await client.get("/auth/github", follow_redirects=False)
    assert response.status_code == 302
    return parse_qs(urlparse(response.headers["location"]).query)


class TestOAuthInitiate:
    """Tests for /auth/github."""

    @pytest.mark.asyncio
    async def test_redirects_to_github(self, client: AsyncClient):
        """Test that login redirects to GitHub's authorize page."""
        response = await client.get("/auth/github", follow_redirects=False)

        assert response.status_code == 302
        location = urlparse(response.headers["location"])
        assert location.netloc == "github.com"
        assert location.path == "/login/oauth/authorize"

    @pytest.mark.asyncio
    async def test_authorize_parameters(self, client: AsyncClient, state_store: OAuthStateStore):
        """Test scopes, forced consent and a recorded state value."""
        params = await start_login(client)

        assert params["client_id"] == ["test-client-id"]
        assert params["redirect_uri"] == ["http://localhost:3000/auth/github/callback"]
        assert params["scope"] == ["repo read:user user:email"]
        assert params["prompt"] == ["consent"]
        assert len(state_store) == 1

    @pytest.mark.asyncio
    async def test_state_is_fresh_per_login(self, client: AsyncClient):
        first = await start_login(client)
        second = await start_login(client)
        assert first["state"] != second["state"]


class TestOAuthCallback:
    """Tests for /auth/github/callback."""

    @pytest.mark.asyncio
    async def test_without_code(self, client: AsyncClient, session_store: InMemorySessionStore):
        """Test that a missing code redirects with no_code and creates no session."""
        before = metrics.oauth_logins_total.get(outcome="no_code")

        response = await client.get("/auth/github/callback", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND}?error=no_code"
        assert len(session_store) == 0
        assert metrics.oauth_logins_total.get(outcome="no_code") == before + 1

    @pytest.mark.asyncio
    async def test_user_denied_access(self, client: AsyncClient, session_store: InMemorySessionStore):
        """Test that GitHub's access_denied callback (no code) is a no_code failure."""
        response = await client.get(
            "/auth/github/callback?error=access_denied&state=abc", follow_redirects=False
        )

        assert response.headers["location"] == f"{FRONTEND}?error=no_code"
        assert len(session_store) == 0

    @pytest.mark.asyncio
    async def test_unknown_state(self, client: AsyncClient, github, session_store: InMemorySessionStore):
        """Test that a state this server never issued is rejected before any exchange."""
        response = await client.get(
            "/auth/github/callback?code=abc&state=forged", follow_redirects=False
        )

        assert response.headers["location"] == f"{FRONTEND}?error=invalid_state"
        assert github.requests == []
        assert len(session_store) == 0

    @pytest.mark.asyncio
    async def test_successful_login(self, client: AsyncClient, github, session_store: InMemorySessionStore):
        """Test the code exchange, profile fetch and session hand-off."""
        github.add(
            "POST",
            "/login/oauth/access_token",
            {"access_token": "gho_new", "token_type": "bearer", "scope": "repo,read:user,user:email"},
        )
        github.add("GET", "/user", {"login": "octocat", "id": 1})
        state = (await start_login(client))["state"][0]

        response = await client.get(
            f"/auth/github/callback?code=abc&state={state}", follow_redirects=False
        )

        assert response.status_code == 302
        location = urlparse(response.headers["location"])
        assert f"{location.scheme}://{location.netloc}{location.path}" == f"{FRONTEND}/dashboard"
        query = parse_qs(location.query)
        assert query["user"] == ["octocat"]

        session = session_store.get(query["token"][0])
        assert session is not None
        assert session.credentials.access_token == "gho_new"
        assert session.user["login"] == "octocat"
        assert metrics.sessions_active.get() == 1

        exchange = github.sent_json("POST", "/login/oauth/access_token")
        assert exchange["code"] == "abc"
        assert exchange["client_secret"] == "test-client-secret"
        assert github.requests[-1].headers["Authorization"] == "bearer gho_new"

    @pytest.mark.asyncio
    async def test_state_is_single_use(self, client: AsyncClient, github):
        """Test that replaying a consumed state is rejected."""
        github.add("POST", "/login/oauth/access_token", {"access_token": "gho_new", "token_type": "bearer"})
        github.add("GET", "/user", {"login": "octocat"})
        state = (await start_login(client))["state"][0]

        await client.get(f"/auth/github/callback?code=abc&state={state}", follow_redirects=False)
        replay = await client.get(
            f"/auth/github/callback?code=abc&state={state}", follow_redirects=False
        )

        assert replay.headers["location"] == f"{FRONTEND}?error=invalid_state"

    @pytest.mark.asyncio
    async def test_bad_code(self, client: AsyncClient, github, session_store: InMemorySessionStore):
        """Test that GitHub's 200-with-error response fails the login."""
        github.add(
            "POST",
            "/login/oauth/access_token",
            {"error": "bad_verification_code", "error_description": "The code passed is incorrect or expired."},
        )
        state = (await start_login(client))["state"][0]

        response = await client.get(
            f"/auth/github/callback?code=stale&state={state}", follow_redirects=False
        )

        assert response.headers["location"] == f"{FRONTEND}?error=auth_failed"
        assert len(session_store) == 0

    @pytest.mark.asyncio
    async def test_malformed_exchange_body(self, client: AsyncClient, github, session_store: InMemorySessionStore):
        """Test that a token response that is not a JSON object fails the login."""
        github.add("POST", "/login/oauth/access_token", ["unexpected"])
        state = (await start_login(client))["state"][0]

        response = await client.get(
            f"/auth/github/callback?code=abc&state={state}", follow_redirects=False
        )

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND}?error=auth_failed"
        assert len(session_store) == 0

    @pytest.mark.asyncio
    async def test_profile_fetch_failure(self, client: AsyncClient, github, session_store: InMemorySessionStore):
        """Test that a token without a readable profile creates no session."""
        github.add("POST", "/login/oauth/access_token", {"access_token": "gho_new", "token_type": "bearer"})
        github.add("GET", "/user", {"message": "Bad credentials"}, status=401)
        state = (await start_login(client))["state"][0]

        response = await client.get(
            f"/auth/github/callback?code=abc&state={state}", follow_redirects=False
        )

        assert response.headers["location"] == f"{FRONTEND}?error=auth_failed"
        assert len(session_store) == 0


class TestOAuthStateStore:
    """Tests for pending-state bookkeeping."""

    def test_issue_and_consume(self):
        store = OAuthStateStore()
        state = store.issue()
        assert store.consume(state) is True
        assert store.consume(state) is False

    def test_missing_state(self):
        assert OAuthStateStore().consume(None) is False

    def test_expired_state(self):
        """Test that a state older than the TTL is rejected."""
        store = OAuthStateStore(ttl_seconds=-1)
        state = store.issue()
        assert store.consume(state) is False
