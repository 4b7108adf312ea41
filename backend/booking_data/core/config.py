"""
Application configuration using pydantic-settings.
All config is loaded from environment variables; DATABASE_URL has no default
and must be provided before the database layer is imported.
"""

from functools import lru_cache

from pydantic import ValidationError
from pydantic_settings import BaseSettings

from booking_data.core.exceptions import ConfigurationError

# Async driver suffixes that Alembic's synchronous engine cannot use
_ASYNC_DRIVERS = ("+asyncpg", "+aiosqlite")


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Booking Data Service"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @property
    def sync_database_url(self) -> str:
        url = self.DATABASE_URL
        for driver in _ASYNC_DRIVERS:
            url = url.replace(driver, "", 1)
        return url

    @property
    def engine_options(self) -> dict:
        """Keyword arguments forwarded to create_async_engine."""
        options = {"echo": self.DB_ECHO, "pool_pre_ping": True}
        # SQLite uses a single-connection pool that rejects sizing arguments
        if not self.DATABASE_URL.startswith("sqlite"):
            options.update(
                pool_size=self.DB_POOL_SIZE,
                max_overflow=self.DB_MAX_OVERFLOW,
                pool_timeout=self.DB_POOL_TIMEOUT,
                pool_recycle=self.DB_POOL_RECYCLE,
            )
        return options


@lru_cache()
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors() if err["type"] == "missing"]
        if "DATABASE_URL" in missing:
            raise ConfigurationError(
                "Please define the DATABASE_URL environment variable (or add it to .env)"
            ) from e
        raise ConfigurationError(f"Invalid application settings: {e}") from e
