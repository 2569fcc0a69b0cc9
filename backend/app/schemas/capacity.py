from __future__ import annotations

from uuid import UUID

from sqlmodel import Field

from app.schemas.common import CamelModel
from app.schemas.refs import ProjectRef, ResourceBrief


class CapacityUpsert(CamelModel):
    resource_id: UUID
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
    total_hours: float = Field(ge=0)


class CapacityAssignment(CamelModel):
    id: UUID
    project: ProjectRef | None = None
    skill_name: str | None = None
    hours: float


class CapacityRead(CamelModel):
    id: UUID
    resource_id: UUID
    month: int
    year: int
    total_hours: float
    assigned_hours: float
    available_hours: float
    utilization_percentage: int
    resource: ResourceBrief | None = None


class CapacityDetail(CapacityRead):
    assignments: list[CapacityAssignment] = []


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class CapacityPage(CamelModel):
    capacities: list[CapacityRead]
    pagination: Pagination
