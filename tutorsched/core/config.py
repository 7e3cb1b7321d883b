from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment."""

    app_name: str = Field(default="Tutor Scheduler", validation_alias="APP_NAME")
    environment: str = Field(default="local", validation_alias="APP_ENV")
    version: str = Field(default="0.1.0")
    jwt_secret: str = Field(default="replace-with-secure-secret", validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256")
    access_token_ttl_seconds: int = Field(default=3600)
    allowed_roles: tuple[str, ...] = Field(
        default=("admin", "tutor", "student"), validation_alias="ALLOWED_ROLES"
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///./tutorsched.db",
        validation_alias="DATABASE_URL",
    )

    # Scheduling rules
    lesson_minutes: int = Field(default=50, validation_alias="LESSON_MINUTES")
    announcement_preview_chars: int = Field(
        default=120, validation_alias="ANNOUNCEMENT_PREVIEW_CHARS"
    )
    mail_from: str = Field(default="scheduler@uni.hr", validation_alias="MAIL_FROM")
    seed_demo_data: bool = Field(default=True, validation_alias="SEED_DEMO_DATA")

    # Background work
    persist_debounce_seconds: float = Field(
        default=0.2, validation_alias="PERSIST_DEBOUNCE_SECONDS"
    )
    maintenance_interval_seconds: int = Field(
        default=3600, validation_alias="MAINTENANCE_INTERVAL_SECONDS"
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()
