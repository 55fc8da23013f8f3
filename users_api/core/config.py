"""
Configuration helpers for the users API.

Settings are read from environment variables once per process so that
routers/services never fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    api_prefix: str
    default_per_page: int
    log_level: str
    cors_origins: tuple[str, ...]


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _list(value: str | None) -> tuple[str, ...]:
        return tuple(item.strip().rstrip("/") for item in (value or "").split(",") if item.strip())

    per_page = _int(os.getenv("DEFAULT_PER_PAGE", "15"), 15)
    prefix = "/" + (os.getenv("API_PREFIX") or "/api/v1").strip().strip("/")
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=(os.getenv("DATABASE_URL") or "sqlite:///./users.db").strip(),
        api_prefix=prefix.rstrip("/"),
        default_per_page=per_page if per_page > 0 else 15,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=_list(os.getenv("CORS_ORIGINS")),
    )
