from __future__ import annotations

import datetime as dt
from uuid import UUID

from app.schemas.common import CamelModel
from app.schemas.projects import ProjectRead
from app.schemas.refs import ProjectBrief, ProjectRef, ResourceBrief, ResourceRef
from app.schemas.resources import ResourceRead


class AssignmentCreate(CamelModel):
    # Presence and ranges are checked by the assignment validator so that
    # errors come back in a fixed order with field-specific messages.
    project_id: UUID | None = None
    resource_id: UUID | None = None
    title: str | None = None
    description: str | None = None
    skill_name: str | None = None
    team: str | None = None
    date: dt.date | None = None
    month: int | None = None
    year: int | None = None
    hours: float | None = None


class AssignmentUpdate(CamelModel):
    title: str | None = None
    description: str | None = None
    skill_name: str | None = None
    month: int | None = None
    year: int | None = None
    hours: float | None = None
    resource_id: UUID | None = None


class AssignmentRead(CamelModel):
    id: UUID
    project_id: UUID
    resource_id: UUID | None = None
    title: str
    description: str | None = None
    skill_name: str | None = None
    team: str | None = None
    date: dt.date | None = None
    month: int | None = None
    year: int | None = None
    hours: float
    created_at: dt.datetime
    updated_at: dt.datetime


class AssignmentDetail(AssignmentRead):
    project: ProjectRef | None = None
    resource: ResourceRef | None = None


class AssignmentListItem(AssignmentRead):
    project: ProjectBrief | None = None
    resource: ResourceBrief | None = None


class AssignmentFull(AssignmentRead):
    project: ProjectRead | None = None
    resource: ResourceRead | None = None
