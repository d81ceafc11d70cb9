"""Application configuration and settings management.

This module defines the application settings loaded from environment
variables and provides a helper for accessing the cached settings.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Attributes:
        DATABASE_URL: Database connection string. When neither this nor
            ``POSTGRES_URL`` is set the relational store is unavailable.
        POSTGRES_URL: Alternative connection string variable.
        DB_ECHO: Echo SQL statements to the log.
        DB_RETRY_ATTEMPTS: Attempts for a read statement that hits a
            connection error.
        DB_RETRY_BACKOFF: Initial delay in seconds between attempts; doubled
            after each failure.
        LOG_LEVEL: Minimum log level.
        LOG_JSON: Render logs as JSON. ``None`` picks JSON when stdout is
            not a terminal.
        SERVICE_NAME: Service name attached to every log event.
        ALLOWED_ORIGINS: Allowed origins for CORS.
    """

    DATABASE_URL: str | None = None
    POSTGRES_URL: str | None = None
    DB_ECHO: bool = False
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_BACKOFF: float = 0.2
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool | None = None
    SERVICE_NAME: str = "chefsite"
    ALLOWED_ORIGINS: List[str] = ["*"]

    class Config:
        """Pydantic configuration for loading environment variables."""

        env_file = ".env"
        extra = "allow"

    @property
    def database_url(self) -> str | None:
        """Return the first configured connection string, if any."""
        return self.DATABASE_URL or self.POSTGRES_URL or None


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    The settings object is cached to prevent reloading environment
    variables multiple times during application lifetime.
    """

    return Settings()
