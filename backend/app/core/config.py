from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-level settings, read from ``RP_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="RP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = "sqlite:///./resource_planner.db"
    database_echo: bool = False
    # Local dev and tests only; deployed databases are migrated with Alembic.
    create_tables: bool = False

    log_level: str = "INFO"
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    default_max_resource_hours: int = Field(default=180, ge=1)
    default_resource_capacity: int = Field(default=160, ge=0)
    working_days_per_month: int = Field(default=20, ge=1)


settings = Settings()
