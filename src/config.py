"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import PostgresDsn, RedisDsn
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
    app_url: str = "http://localhost:8080"
    app_name: str = "Gin Blog"

    # Database
    database_url: PostgresDsn

    # Redis
    redis_url: RedisDsn

    # GitHub OAuth
    github_client_id: str = ""
    github_client_secret: str = ""
    github_redirect_uri: str = ""

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = ""

    # Discord OAuth
    discord_client_id: str = ""
    discord_client_secret: str = ""
    discord_redirect_uri: str = ""

    # Trusted gateway (reverse proxy that authenticates admins upstream)
    gateway_user_header: str = "X-User-Id"
    gateway_secret: str = ""

    # Semantic search
    embedding_model: str = "BAAI/bge-base-en-v1.5"

    # Include stack traces in OAuth callback error bodies
    expose_error_details: bool = True

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def database_url_async(self) -> str:
        """Get async database URL (postgresql+asyncpg)."""
        url = str(self.database_url)
        return url.replace("postgresql://", "postgresql+asyncpg://")

    def oauth_credentials(self, provider: str) -> tuple[str, str, str]:
        """Return (client_id, client_secret, redirect_uri) for a provider.

        Values are stripped since secrets pasted into dashboards often carry
        trailing whitespace. The redirect URI defaults to the app's own
        callback route.
        """
        client_id = getattr(self, f"{provider}_client_id").strip()
        client_secret = getattr(self, f"{provider}_client_secret").strip()
        redirect_uri = getattr(self, f"{provider}_redirect_uri").strip()
        if not redirect_uri:
            redirect_uri = f"{self.app_url}/login/{provider}/callback"
        return client_id, client_secret, redirect_uri


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]
