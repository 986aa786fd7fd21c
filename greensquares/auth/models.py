"""Authentication-related Pydantic models."""

from pydantic import BaseModel


class OAuthToken(BaseModel):
    """Credentials returned by the GitHub token exchange."""

    access_token: str
    token_type: str = "bearer"
    scope: str | None = None

    @property
    def authorization(self) -> str:
        """Value for the ``Authorization`` header of GitHub API calls."""
        return f"{self.token_type} {self.access_token}"
