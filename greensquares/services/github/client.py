"""GitHub REST API client.

Thin authenticated wrapper over the REST and Git data endpoints the backend
proxies. Upstream status codes and messages are passed through unchanged;
nothing is cached or retried.
Documentation: https://docs.github.com/en/rest
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from greensquares.auth.models import OAuthToken
from greensquares.constants import (
    BLOB_FILE_MODE,
    GITHUB_API_URL,
    GITHUB_MEDIA_TYPE,
    REPOSITORY_PAGE_SIZE,
    REPOSITORY_SORT,
)
from greensquares.utils.metrics import metrics

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "login",
    "name",
    "avatar_url",
    "public_repos",
    "followers",
    "following",
    "created_at",
)
DETAILED_PROFILE_FIELDS = PROFILE_FIELDS + ("bio", "location", "company", "blog")
REPOSITORY_FIELDS = (
    "id",
    "name",
    "full_name",
    "description",
    "private",
    "language",
    "stargazers_count",
    "forks_count",
    "updated_at",
    "html_url",
    "default_branch",
)


class GitHubError(Exception):
    """Base exception for GitHub errors."""

    status_code: int | None = None
    documentation_url: str | None = None


class GitHubAPIError(GitHubError):
    """GitHub answered with a 4xx/5xx status."""

    def __init__(
        self,
        status_code: int,
        message: str,
        documentation_url: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.documentation_url = documentation_url


class GitHubConnectionError(GitHubError):
    """GitHub could not be reached."""

    pass


def shape_profile(user: dict[str, Any], detailed: bool = False) -> dict[str, Any]:
    """Select the stable subset of profile fields exposed to the frontend."""
    fields = DETAILED_PROFILE_FIELDS if detailed else PROFILE_FIELDS
    return {name: user.get(name) for name in fields}


def shape_repository(repo: dict[str, Any]) -> dict[str, Any]:
    return {name: repo.get(name) for name in REPOSITORY_FIELDS}


class GitHubClient:
    """Client for the GitHub REST API.

    Usage:
        client = GitHubClient(http, token=OAuthToken(access_token="gho_..."))

        profile = await client.get_authenticated_user()
        repos = await client.list_repositories()

    Without a token the client makes anonymous calls, which only reach public
    endpoints.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: OAuthToken | None = None,
        base_url: str = GITHUB_API_URL,
    ):
        self.http = http
        self.token = token
        self.base_url = base_url.rstrip("/")

    def _get_headers(self) -> dict[str, str]:
        headers = {"Accept": GITHUB_MEDIA_TYPE}
        if self.token is not None:
            headers["Authorization"] = self.token.authorization
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make API request.

        Args:
            method: HTTP method
            endpoint: API path starting with ``/``
            params: Query parameters
            json: JSON body

        Returns:
            Parsed JSON response

        Raises:
            GitHubAPIError: On any 4xx/5xx response
            GitHubConnectionError: When GitHub cannot be reached
        """
        url = f"{self.base_url}{endpoint}"

        try:
            response = await self.http.request(
                method,
                url,
                headers=self._get_headers(),
                params=params,
                json=json,
            )
        except httpx.TimeoutException as e:
            metrics.github_api_requests_total.inc(method=method, status="timeout")
            raise GitHubConnectionError(f"GitHub request timed out: {e}") from e
        except httpx.TransportError as e:
            metrics.github_api_requests_total.inc(method=method, status="error")
            raise GitHubConnectionError(f"Cannot connect to GitHub: {e}") from e

        metrics.github_api_requests_total.inc(method=method, status=str(response.status_code))

        if response.status_code >= 400:
            raise _api_error(response)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ==================== Users ====================

    async def get_authenticated_user(self) -> dict[str, Any]:
        """Get the profile of the token's owner."""
        return await self._request("GET", "/user")

    async def get_user(self, username: str) -> dict[str, Any]:
        return await self._request("GET", f"/users/{username}")

    async def get_user_events(self, username: str) -> list[dict[str, Any]]:
        """Recent events for a user, including private ones the token can see."""
        return await self._request("GET", f"/users/{username}/events") or []

    async def get_public_events(self, username: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"/users/{username}/events/public") or []

    # ==================== Repositories ====================

    async def list_repositories(
        self,
        sort: str = REPOSITORY_SORT,
        per_page: int = REPOSITORY_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """List repositories of the authenticated user (first page only)."""
        params: dict[str, Any] = {"per_page": per_page}
        if sort:
            params["sort"] = sort
        return await self._request("GET", "/user/repos", params=params) or []

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        return await self._request("GET", f"/repos/{owner}/{repo}")

    async def get_contents(self, owner: str, repo: str, path: str = "") -> Any:
        """Get a file or directory listing. ``path=""`` lists the repository root."""
        path = _escape(path.lstrip("/"))
        return await self._request("GET", f"/repos/{owner}/{repo}/contents/{path}")

    # ==================== Git data ====================

    async def get_branch_ref(self, owner: str, repo: str, branch: str) -> dict[str, Any]:
        return await self._request("GET", f"/repos/{owner}/{repo}/git/ref/heads/{_escape(branch)}")

    async def get_git_commit(self, owner: str, repo: str, sha: str) -> dict[str, Any]:
        return await self._request("GET", f"/repos/{owner}/{repo}/git/commits/{sha}")

    async def create_blob(self, owner: str, repo: str, content_base64: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/git/blobs",
            json={"content": content_base64, "encoding": "base64"},
        )

    async def create_tree(
        self, owner: str, repo: str, base_tree: str, path: str, blob_sha: str
    ) -> dict[str, Any]:
        """Create a tree that layers one blob at ``path`` over ``base_tree``."""
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/git/trees",
            json={
                "base_tree": base_tree,
                "tree": [
                    {
                        "path": path,
                        "mode": BLOB_FILE_MODE,
                        "type": "blob",
                        "sha": blob_sha,
                    }
                ],
            },
        )

    async def create_git_commit(
        self, owner: str, repo: str, message: str, tree: str, parents: list[str]
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/git/commits",
            json={"message": message, "tree": tree, "parents": parents},
        )

    async def update_branch_ref(
        self, owner: str, repo: str, branch: str, sha: str
    ) -> dict[str, Any]:
        """Move a branch to ``sha``. Fast-forward only."""
        return await self._request(
            "PATCH",
            f"/repos/{owner}/{repo}/git/refs/heads/{_escape(branch)}",
            json={"sha": sha, "force": False},
        )


def _escape(segment: str) -> str:
    """Percent-encode a repository path or branch name, keeping its slashes."""
    return quote(segment, safe="/")

def _api_error(response: httpx.Response) -> GitHubAPIError:
    """Build an error from GitHub's ``{"message", "documentation_url"}`` body."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("message") or response.reason_phrase
        documentation_url = body.get("documentation_url")
    else:
        message = response.text or response.reason_phrase
        documentation_url = None

    logger.warning(
        f"GitHub {response.request.method} {response.request.url.path} "
        f"failed with {response.status_code}: {message}"
    )
    return GitHubAPIError(response.status_code, message, documentation_url)
