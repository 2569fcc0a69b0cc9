from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Text, UniqueConstraint
from sqlmodel import Column, Field, SQLModel

from app.core.time import utcnow


class AppConfig(SQLModel, table=True):
    """Generic key/value setting, optionally scoped to a team (``team`` NULL = global)."""

    __tablename__ = "app_config"
    __table_args__ = (UniqueConstraint("config_key", "team", name="uq_app_config_key_team"),)

    id: int | None = Field(default=None, primary_key=True)
    config_key: str = Field(index=True)
    config_value: str = Field(sa_column=Column(Text, nullable=False))
    config_type: str = Field(default="string")  # json | number | boolean | string
    team: str | None = Field(default=None, index=True)
    description: str | None = None
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
