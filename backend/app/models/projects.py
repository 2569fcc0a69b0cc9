from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.core.time import utcnow


class Project(SQLModel, table=True):
    __tablename__ = "projects"
    __table_args__ = (UniqueConstraint("code", "team", name="uq_projects_code_team"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    code: str = Field(index=True)
    title: str
    description: str | None = None
    type: str | None = None
    priority: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    # References statuses.id / domains.id; the catalog tables are read-only lookups.
    status: int | None = None
    domain: int | None = None

    # Projects are owned by a team; (code, team) is unique.
    team: str = Field(index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class ProjectSkillBreakdown(SQLModel, table=True):
    __tablename__ = "project_skill_breakdown"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True)
    skill_name: str
    month: int = Field(ge=1, le=12)
    year: int
    hours: float = Field(default=0)
