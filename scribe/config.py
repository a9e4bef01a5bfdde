"""Runtime settings, read from the environment and an optional ``.env``."""

from __future__ import annotations

import json
from typing import Annotated, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the blog API.

    Only SQLite is supported. ``async_database_url`` is derived from
    ``database_url`` unless set explicitly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "staging", "production", "test"] = (
        "development"
    )
    debug: bool = True
    log_level: str = "INFO"

    # CORS allowlist; comma separated or a JSON list.
    allowed_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    metrics_username: str = "prometheus"
    metrics_password: str | None = None

    database_url: str = Field(
        default="sqlite:///./data/scribe.db",
        validation_alias=AliasChoices("DATABASE_URL"),
    )
    async_database_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ASYNC_DATABASE_URL"),
    )
    db_echo: bool = Field(
        default=False,
        validation_alias=AliasChoices("DB_ECHO", "SQL_ECHO"),
    )

    # Tokens
    secret_key: str = Field(
        default="dev-secret",
        validation_alias=AliasChoices("SECRET_KEY", "JWT_SECRET"),
    )
    jwt_lifetime_seconds: int = Field(default=60 * 60 * 24 * 30, gt=0)

    # Bootstrap account for tools/create_admin_user.py
    admin_email: str | None = None
    admin_password: str | None = None

    # Listing and slugs
    default_page_size: int = Field(default=10, ge=1)
    max_page_size: int = Field(default=100, ge=1)
    max_slug_attempts: int = Field(default=2000, ge=1)

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def split_origins(cls, value: str | list[str] | None) -> list[str]:
        if value is None:
            return []
        if isinstance(value, list):
            return value
        raw = value.strip()
        if raw.startswith("["):
            return list(json.loads(raw))
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @field_validator("async_database_url", mode="after")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return value or None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def resolved_async_database_url(self) -> str:
        if self.async_database_url:
            return self.async_database_url
        return self.database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)


settings = Settings()
