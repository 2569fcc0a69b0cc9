from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import model_validator

from app.schemas.common import CamelModel
from app.schemas.refs import ProjectBrief


class SkillIn(CamelModel):
    skill_name: str
    proficiency: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_name(cls, data: Any) -> Any:
        # Clients send either {"name": ...} or {"skillName": ...}, or a bare string.
        if isinstance(data, str):
            return {"skill_name": data}
        if isinstance(data, dict) and "name" in data and "skillName" not in data and "skill_name" not in data:
            return {**data, "skill_name": data["name"]}
        return data


class SkillRead(CamelModel):
    skill_name: str
    proficiency: str | None = None


class ResourceCreate(CamelModel):
    code: str | None = None
    name: str | None = None
    email: str | None = None
    team: str | None = None
    default_capacity: int | None = None
    active: bool = True
    skills: list[SkillIn] = []


class ResourceUpdate(CamelModel):
    code: str | None = None
    name: str | None = None
    email: str | None = None
    team: str | None = None
    default_capacity: int | None = None
    active: bool | None = None
    # Replaces the whole skill set.
    skills: list[SkillIn] | None = None


class ResourceRead(CamelModel):
    id: UUID
    code: str
    name: str
    email: str | None = None
    team: str
    default_capacity: int
    active: bool
    created_at: datetime
    updated_at: datetime


class ResourceWithSkills(ResourceRead):
    resource_skills: list[SkillRead] = []


class ResourceAssignmentItem(CamelModel):
    id: UUID
    project_id: UUID
    month: int | None = None
    year: int | None = None
    hours: float
    project: ProjectBrief | None = None


class CapacityItem(CamelModel):
    id: UUID
    month: int
    year: int
    total_hours: float


class ResourceListItem(ResourceWithSkills):
    assignments: list[ResourceAssignmentItem] = []
    capacities: list[CapacityItem] = []
    skills_count: int = 0
    total_assigned_hours: float = 0
    active_projects_count: int = 0


class ResourceMetrics(CamelModel):
    total_assigned_hours: float
    active_projects_count: int
    skills_count: int


class ResourceDetail(ResourceWithSkills):
    assignments: list[ResourceAssignmentItem] = []
    capacities: list[CapacityItem] = []
    metrics: ResourceMetrics
