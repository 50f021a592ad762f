"""
Notely Backend — Application Configuration
===========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and returns a `Settings` object.
Who:   Imported by the bootstrapper, the app factory and Alembic.
When:  `load_settings()` reads the environment once per process, in main()
       or Alembic's env.py; invalid values surface as ConfigurationError.

Optional database:
    DATABASE_URL is the only switch between the two service modes. When it is
    unset (or set to an empty string) the service starts in degraded mode and
    exposes nothing but the health check.
"""

from typing import List, Optional

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings

from notely.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern for readability.
    """

    # ── Server ────────────────────────────────────────────────────────────
    # PORT is what most container platforms inject; 8080 otherwise
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)

    # ── Database ──────────────────────────────────────────────────────────
    # What: Connection string, with or without a scheme
    # Examples: postgres://user:pw@db:5432/notely, user:pw@db:5432/notely,
    #           sqlite+aiosqlite:///./notely.db
    # None means degraded mode (health check only)
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection string; absence disables CRUD endpoints",
    )

    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # What: Create tables from ORM metadata at startup instead of via Alembic
    # Intended for local development and throwaway SQLite databases
    database_create_tables: bool = Field(default=False)

    @field_validator("database_url")
    @classmethod
    def empty_database_url_is_unset(cls, v: Optional[str]) -> Optional[str]:
        """An exported-but-empty DATABASE_URL behaves like an unset one."""
        if v is None or not v.strip():
            return None
        return v.strip()

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated list of origins; the landing page is same-origin, so
    # this only matters for third-party API clients
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @property
    def database_enabled(self) -> bool:
        return self.database_url is not None

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATABASE_URL and database_url both work
        "extra": "ignore",
    }


def load_settings() -> Settings:
    """
    Read Settings from the environment.

    Raises:
        ConfigurationError: a variable is present but has an invalid value
                            (e.g. PORT=abc).
    """
    try:
        return Settings()
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']).upper()}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(
            f"Invalid environment configuration: {problems}",
            context={"error_count": e.error_count()},
        ) from e
