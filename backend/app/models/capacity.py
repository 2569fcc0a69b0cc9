from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.core.time import utcnow


class Capacity(SQLModel, table=True):
    """Explicit monthly capacity for a resource, overriding its default."""

    __tablename__ = "capacity"
    __table_args__ = (
        UniqueConstraint("resource_id", "month", "year", name="uq_capacity_resource_month_year"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    resource_id: UUID = Field(foreign_key="resources.id", index=True)
    month: int = Field(ge=1, le=12)
    year: int
    total_hours: float

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
