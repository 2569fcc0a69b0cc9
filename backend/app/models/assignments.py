from __future__ import annotations

import datetime as dt
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.core.time import utcnow


class Assignment(SQLModel, table=True):
    __tablename__ = "assignments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True)
    resource_id: UUID | None = Field(default=None, foreign_key="resources.id", index=True)

    title: str
    description: str | None = None
    skill_name: str | None = None
    team: str | None = None

    # Either a concrete day (month/year derived from it) or a bare month/year.
    date: dt.date | None = Field(default=None, index=True)
    month: int | None = None
    year: int | None = None
    hours: float

    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
