from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from app.schemas.common import CamelModel
from app.schemas.refs import ResourceContact


class ProjectCreate(CamelModel):
    code: str | None = None
    title: str | None = None
    description: str | None = None
    type: str | None = None
    priority: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: int | None = None
    domain: int | None = None
    team: str | None = None


class ProjectUpdate(CamelModel):
    code: str | None = None
    title: str | None = None
    description: str | None = None
    type: str | None = None
    priority: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: int | None = None
    domain: int | None = None
    team: str | None = None


class ProjectRead(CamelModel):
    id: UUID
    code: str
    title: str
    description: str | None = None
    type: str | None = None
    priority: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: int | None = None
    domain: int | None = None
    team: str
    created_at: datetime
    updated_at: datetime


class SkillBreakdownItem(CamelModel):
    id: UUID
    skill_name: str
    month: int
    year: int
    hours: float


class ProjectAssignmentItem(CamelModel):
    id: UUID
    resource_id: UUID | None = None
    skill_name: str | None = None
    month: int | None = None
    year: int | None = None
    hours: float
    resource: ResourceContact | None = None


class ProjectListItem(ProjectRead):
    project_skill_breakdowns: list[SkillBreakdownItem] = []
    assignments: list[ProjectAssignmentItem] = []
    total_committed_hours: float = 0
    total_assigned_hours: float = 0
    assigned_resources_count: int = 0


class ProjectMetrics(CamelModel):
    total_committed_hours: float
    total_assigned_hours: float
    assigned_resources_count: int
    completion_percentage: int


class ProjectDetail(ProjectRead):
    project_skill_breakdowns: list[SkillBreakdownItem] = []
    assignments: list[ProjectAssignmentItem] = []
    metrics: ProjectMetrics
