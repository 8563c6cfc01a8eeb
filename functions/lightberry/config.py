"""
Configuration and settings for the Lightberry backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Hosted store: any SQLAlchemy URL, or a read-only Strapi CMS
    database_url: Optional[str] = Field(default=None)
    strapi_url: Optional[str] = Field(default=None)

    # Upper-bound wait for a single remote call before falling back
    store_timeout_seconds: float = Field(default=8.0, gt=0)
    diagnostic_timeout_seconds: float = Field(default=5.0, gt=0)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Admin auth
    auth_mode: Literal["demo", "store"] = Field(default="demo")
    demo_admin_email: str = Field(default="admin@example.com")
    demo_admin_password: str = Field(default="admin123")
    session_ttl_seconds: int = Field(default=60 * 60 * 24, gt=0)

    # Sessions (Redis); in-memory when unset
    redis_url: Optional[str] = Field(default=None)
    redis_session_prefix: str = Field(default="lightberry:session:")


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def has_store_config(settings: Settings) -> bool:
    """True when a hosted store is configured and in-memory mode is off."""
    if settings.use_in_memory_backends:
        return False
    return _present(settings.database_url) or _present(settings.strapi_url)


def missing_store_settings(settings: Settings) -> list[str]:
    if _present(settings.database_url) or _present(settings.strapi_url):
        return []
    return ["DATABASE_URL", "STRAPI_URL"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
