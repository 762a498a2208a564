"""Environment-driven configuration for the SharedMelody favorites API.

Values come from the process environment and an optional ``.env`` file. Use
:func:`get_settings` instead of instantiating :class:`AppSettings` directly so
every module shares one parsed copy.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/sharedmelody.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_FAVORITES_CACHE_TTL = 300
DEFAULT_JWT_SECRET = "shared-melody-secret-key-2024"
DEFAULT_JWT_ALGORITHM = "HS256"
DEFAULT_LOG_LEVEL = "INFO"

_SYNC_POSTGRES_SCHEMES = ("postgres://", "postgresql://")
_ASYNC_SCHEMES = (POSTGRES_ASYNC_PREFIX, "sqlite+aiosqlite://")


def to_async_database_url(url: str) -> str:
    """Rewrite a plain Postgres URL for the async psycopg driver.

    Raises ``RuntimeError`` for schemes the API cannot drive asynchronously.
    """

    url = url.strip()
    for scheme in _SYNC_POSTGRES_SCHEMES:
        if url.startswith(scheme):
            return POSTGRES_ASYNC_PREFIX + url[len(scheme):]
    if url.startswith(_ASYNC_SCHEMES):
        return url
    raise RuntimeError(f"Unsupported DATABASE_URL (expected PostgreSQL or SQLite): {url}")


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="PostgreSQL URL; unset means the local SQLite database.",
    )
    use_sqlite: bool = Field(default=False, alias="USE_SQLITE")
    redis_url: str = Field(default=DEFAULT_REDIS_URL, alias="REDIS_URL")
    redis_retry_backoff_seconds: float = Field(
        default=30.0,
        alias="REDIS_RETRY_BACKOFF_SECONDS",
        ge=0,
        description="How long Redis stays disabled after a failed connect.",
    )
    favorites_cache_ttl: int = Field(
        default=DEFAULT_FAVORITES_CACHE_TTL,
        alias="FAVORITES_CACHE_TTL",
        ge=1,
        description="Seconds that rankings and per-song stats stay cached.",
    )
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET, alias="JWT_SECRET")
    jwt_algorithm: str = Field(default=DEFAULT_JWT_ALGORITHM, alias="JWT_ALGORITHM")
    cors_allow_origins_raw: str | None = Field(default=None, alias="CORS_ALLOW_ORIGINS")
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, alias="LOG_LEVEL")
    slow_query_threshold: float = Field(
        default=0.1,
        alias="SLOW_QUERY_THRESHOLD",
        description="Seconds after which a statement is logged as slow.",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper() or DEFAULT_LOG_LEVEL

    @property
    def resolved_database_url(self) -> str:
        if self.use_sqlite or not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL
        return to_async_database_url(self.database_url)

    @property
    def database_type(self) -> str:
        return "sqlite" if self.resolved_database_url.startswith("sqlite") else "postgresql"

    @property
    def cors_allow_origins(self) -> list[str]:
        raw = self.cors_allow_origins_raw or ""
        return [item.strip().rstrip("/") for item in raw.split(",") if item.strip().rstrip("/")]

    @property
    def log_level_numeric(self) -> int:
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Warnings for optional settings that were left at their defaults."""

        warnings: list[str] = []
        if "redis_url" not in self.model_fields_set:
            warnings.append(
                "REDIS_URL is not set - favorites rankings and stats will not be cached"
            )
        if not self.cors_allow_origins:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only"
            )
        if self.jwt_secret == DEFAULT_JWT_SECRET:
            warnings.append(
                "JWT_SECRET is not set - using the development secret to verify tokens"
            )
        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_FAVORITES_CACHE_TTL",
    "DEFAULT_JWT_ALGORITHM",
    "DEFAULT_JWT_SECRET",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REDIS_URL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "POSTGRES_ASYNC_PREFIX",
    "get_settings",
    "to_async_database_url",
]
