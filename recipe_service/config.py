"""
Centralized configuration management using pydantic-settings.
This module provides a single source of truth for all application configuration.
"""


import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from recipe_service.utils.logger import setup_logger

load_dotenv(override=True)


logger = setup_logger("core_config")

PROJECT_ROOT = Path(__file__).resolve().parents[1]

STORAGE_BACKENDS = ("sqlalchemy", "memory")


class Settings(BaseSettings):
    """
    Application settings managed by pydantic-settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        env_prefix="",
        populate_by_name=True,
    )

    # ===== Database Configuration =====
    database_url: str | None = Field(
        default=None,
        alias="RECIPES_DATABASE_URL",
        description="Application database URL (postgresql:// or sqlite://)",
    )

    storage_backend: str = Field(
        default="sqlalchemy",
        alias="STORAGE_BACKEND",
        description="Repository backend: 'sqlalchemy' (database) or 'memory'",
    )

    db_echo: bool = Field(
        default=False,
        alias="DB_ECHO",
        description="Echo SQL statements issued by the engine",
    )

    # ===== Rate Limiting =====
    rate_limit_refill_rate: float = Field(
        default=1.0,
        alias="RATE_LIMIT_REFILL_RATE",
        description="Tokens added to the shared bucket per second",
    )

    rate_limit_burst: int = Field(
        default=3,
        alias="RATE_LIMIT_BURST",
        description="Maximum number of tokens the shared bucket holds",
    )

    # ===== API Behaviour =====
    recipes_page_size: int = Field(
        default=12,
        alias="RECIPES_PAGE_SIZE",
        description="Number of recipes returned per page by the list endpoint",
    )

    login_reject_mismatch: bool = Field(
        default=False,
        alias="LOGIN_REJECT_MISMATCH",
        description="Answer 401 when login credentials do not match (default: 200 with empty message)",
    )

    legacy_not_found_status: bool = Field(
        default=False,
        alias="LEGACY_NOT_FOUND_STATUS",
        description="Report missing entities as 500 instead of 404",
    )

    legacy_required_fields: bool = Field(
        default=False,
        alias="LEGACY_REQUIRED_FIELDS",
        description="Reject register/login bodies only when every field is empty",
    )

    # ===== Static Pages =====
    pages_dir: Path = Field(
        default=PROJECT_ROOT / "pages",
        alias="PAGES_DIR",
        description="Directory holding the HTML pages",
    )

    static_dir: Path = Field(
        default=PROJECT_ROOT / "static",
        alias="STATIC_DIR",
        description="Directory served under /static",
    )

    # ===== Server Configuration =====
    server_host: str = Field(
        default="0.0.0.0", alias="SERVER_HOST", description="Server host address"
    )

    server_port: int = Field(
        default=6060, alias="SERVER_PORT", description="Server port number"
    )

    server_workers: int = Field(
        default=1, alias="SERVER_WORKERS", description="Number of uvicorn workers"
    )

    # ===== CORS Configuration =====
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:6060",
            "http://127.0.0.1:6060",
        ],
        alias="CORS_ALLOW_ORIGINS",
        description="CORS allowed origins",
    )

    cors_allow_credentials: bool = Field(
        default=True,
        alias="CORS_ALLOW_CREDENTIALS",
        description="Whether to allow credentials in CORS requests",
    )

    cors_allow_methods: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_METHODS",
        description="CORS allowed methods",
    )

    cors_allow_headers: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_HEADERS",
        description="CORS allowed headers",
    )

    # User-facing hint for database connection errors
    db_unavailable_hint: str = os.getenv(
        "DB_UNAVAILABLE_HINT",
        "Database connection failed. The server may be offline or network connectivity is down.",
    )

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings and log warnings for missing critical configurations."""
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {STORAGE_BACKENDS}, got '{self.storage_backend}'"
            )

        if self.storage_backend == "sqlalchemy" and not self.database_url:
            logger.warning("RECIPES_DATABASE_URL environment variable not set.")

        if self.recipes_page_size < 1:
            raise ValueError("RECIPES_PAGE_SIZE must be at least 1")

        logger.debug(
            f"Rate limit: {self.rate_limit_refill_rate}/s, burst {self.rate_limit_burst}"
        )
        return self

    @property
    def async_database_url(self) -> str | None:
        """Database URL with the async driver selected."""
        url = self.database_url
        if not url:
            return None
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        if url.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
            return url
        raise ValueError(f"Unsupported database URL prefix: {url}")


# Global settings instance
settings = Settings()
