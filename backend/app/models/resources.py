from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.core.time import utcnow


class Resource(SQLModel, table=True):
    __tablename__ = "resources"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    code: str = Field(index=True, unique=True)
    name: str = Field(index=True)
    email: str | None = None
    team: str = Field(index=True)

    # Monthly hours; the daily figure is derived (see services.capacity).
    default_capacity: int = Field(default=160, ge=0)
    active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class ResourceSkill(SQLModel, table=True):
    __tablename__ = "resource_skills"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    resource_id: UUID = Field(foreign_key="resources.id", index=True, ondelete="CASCADE")
    skill_name: str = Field(index=True)
    proficiency: str | None = None
