"""
Application configuration using Pydantic settings.

Usage:
    from devconnector.config import get_settings
    settings = get_settings()
"""

import warnings
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_WEAK_JWT_SECRETS = {
    "change_me", "changeme", "secret", "your-secret-key",
    "jwt-secret", "supersecret", "development", "test",
}


def _jwt_secret_problem(secret: str) -> str | None:
    if secret.lower() in _WEAK_JWT_SECRETS:
        return f"JWT_SECRET_KEY is set to a default value ('{secret}')"
    if len(secret) < 32:
        return f"JWT_SECRET_KEY should be at least 32 characters (got {len(secret)})"
    return None


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    Required for production:
        - JWT_SECRET_KEY (min 32 chars)

    Recommended:
        - GITHUB_TOKEN (raises the GitHub API rate limit for repository lookups)
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "DevConnector"
    api_prefix: str = "/api"
    debug: bool = Field(default=False)
    env: str = Field(default="development", validation_alias="ENV")

    # Database
    database_url: str = Field(default="sqlite:///devconnector.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")

    # JWT / Authentication
    jwt_secret_key: str = Field(default="CHANGE_ME", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24)

    # GitHub repository lookup
    github_api_base: str = Field(default="https://api.github.com", validation_alias="GITHUB_API_BASE")
    github_token: Optional[str] = Field(default=None, validation_alias="GITHUB_TOKEN")
    github_timeout_seconds: float = Field(default=10.0, validation_alias="GITHUB_TIMEOUT_SECONDS")
    github_repo_limit: int = Field(default=5, ge=1, le=100, validation_alias="GITHUB_REPO_LIMIT")

    # Profile writes
    profile_write_attempts: int = Field(default=3, ge=1, validation_alias="PROFILE_WRITE_ATTEMPTS")

    # CORS
    cors_allowed_origins: str = Field(default="http://localhost:3000", validation_alias="CORS_ALLOWED_ORIGINS")

    @model_validator(mode="after")
    def check_jwt_secret(self) -> "Settings":
        """Weak JWT secrets are fatal in production and a warning elsewhere."""
        problem = _jwt_secret_problem(self.jwt_secret_key)
        if problem is None:
            return self
        if self.is_production:
            raise ValueError(f"{problem} (not allowed in production)")
        warnings.warn(f"{problem}; set a proper key before deploying", UserWarning, stacklevel=2)
        return self

    @property
    def is_production(self) -> bool:
        return self.env.lower() in ("production", "prod")

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    def validate_production_config(self) -> tuple[List[str], List[str]]:
        """
        Check the settings a production deployment needs.

        Returns:
            (errors, advisories): errors stop startup, advisories are only logged
        """
        errors = []
        advisories = []

        problem = _jwt_secret_problem(self.jwt_secret_key)
        if problem:
            errors.append(problem)

        if not self.github_token:
            advisories.append(
                "GITHUB_TOKEN not set - repository lookups use the unauthenticated "
                "GitHub rate limit (60 requests/hour)."
            )
        if self.database_url.startswith("sqlite"):
            advisories.append("DATABASE_URL points at SQLite - use PostgreSQL in production")

        return errors, advisories


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
