"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "GreenSquares"
    port: int = 3000
    backend_url: str = ""

    # Frontend that receives the OAuth redirect
    frontend_url: str = "http://localhost:5173"

    # GitHub OAuth
    github_client_id: str
    github_client_secret: str
    github_redirect_uri: str

    @model_validator(mode="after")
    def default_backend_url(self) -> "Settings":
        """Derive the public backend URL from the port when not set."""
        if not self.backend_url:
            self.backend_url = f"http://localhost:{self.port}"
        self.backend_url = self.backend_url.rstrip("/")
        self.frontend_url = self.frontend_url.rstrip("/")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def github_auth_url(self) -> str:
        """URL of this backend's OAuth entry point."""
        return f"{self.backend_url}/auth/github"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]
