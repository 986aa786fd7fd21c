"""Tests for session management API endpoints."""

import pytest
from httpx import AsyncClient

from greensquares.auth import InMemorySessionStore


class TestClearSession:
    """Tests for /api/auth/clear."""

    @pytest.mark.asyncio
    async def test_clear_authenticated(
        self,
        authenticated_client: AsyncClient,
        session_store: InMemorySessionStore,
        session_token: str,
    ):
        """Test that clearing removes the caller's session."""
        response = await authenticated_client.post("/api/auth/clear")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert "re-authenticate" in data["message"]
        assert session_store.get(session_token) is None

    @pytest.mark.asyncio
    async def test_clear_without_token(self, client: AsyncClient):
        """Test that clearing without a token still succeeds."""
        response = await client.post("/api/auth/clear")
        assert response.status_code == 200
        assert response.json()["success"] is True

    @pytest.mark.asyncio
    async def test_clear_twice(self, authenticated_client: AsyncClient):
        """Test that clearing an already-cleared session is a no-op."""
        await authenticated_client.post("/api/auth/clear")
        response = await authenticated_client.post("/api/auth/clear")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_cleared_token_is_rejected(self, authenticated_client: AsyncClient):
        await authenticated_client.post("/api/auth/clear")
        response = await authenticated_client.get("/api/repositories")
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid session token"


class TestValidateToken:
    """Tests for /api/auth/validate."""

    @pytest.mark.asyncio
    async def test_validate_unauthenticated(self, client: AsyncClient):
        """Test that validation needs a session token."""
        response = await client.get("/api/auth/validate")
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "No session token provided"}

    @pytest.mark.asyncio
    async def test_validate_unknown_token(self, client: AsyncClient):
        response = await client.get(
            "/api/auth/validate", headers={"Authorization": "Bearer nope"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid session token"

    @pytest.mark.asyncio
    async def test_validate_ok(self, authenticated_client: AsyncClient, github):
        """Test that a working token probes the profile and one repository."""
        github.add("GET", "/user", {"login": "octocat"})
        github.add("GET", "/user/repos", [{"id": 1}])

        response = await authenticated_client.get("/api/auth/validate")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["token_valid"] is True
        assert data["user"] == "octocat"
        assert data["scopes_available"] is True
        assert github.calls() == [("GET", "/user"), ("GET", "/user/repos")]
        assert github.requests[-1].url.params["per_page"] == "1"

    @pytest.mark.asyncio
    async def test_validate_revoked_token(self, authenticated_client: AsyncClient, github):
        """Test that GitHub's status and message are passed through."""
        github.add("GET", "/user", {"message": "Bad credentials"}, status=401)

        response = await authenticated_client.get("/api/auth/validate")

        assert response.status_code == 401
        data = response.json()
        assert data["success"] is False
        assert data["token_valid"] is False
        assert data["error"] == "Bad credentials"
        assert "re-authenticate" in data["suggestion"]
