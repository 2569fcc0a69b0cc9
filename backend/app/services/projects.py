from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from app.core.errors import ConflictError, ValidationError
from app.core.logging import get_logger
from app.db import crud
from app.models.assignments import Assignment
from app.models.projects import Project, ProjectSkillBreakdown
from app.models.resources import Resource
from app.schemas.projects import (
    ProjectAssignmentItem,
    ProjectCreate,
    ProjectDetail,
    ProjectListItem,
    ProjectMetrics,
    ProjectRead,
    ProjectUpdate,
    SkillBreakdownItem,
)
from app.schemas.refs import ResourceContact
from app.services.capacity import round_half_up

logger = get_logger(__name__)

MAX_TEXT_LENGTH = 255
UPDATABLE_FIELDS = (
    "code",
    "title",
    "description",
    "type",
    "priority",
    "start_date",
    "end_date",
    "status",
    "domain",
    "team",
)
# Fields where an explicit null clears the column; for the rest null means "unchanged".
_NULLABLE_FIELDS = frozenset({"description", "start_date", "end_date"})


@dataclass(frozen=True, slots=True)
class ProjectFilters:
    type: str | None = None
    status: int | None = None
    domain: int | None = None
    priority: str | None = None
    team: str | None = None


def _check_text(errors: list[dict[str, str]], field: str, value: str | None, *, required: bool) -> None:
    if value is None or not value.strip():
        if required:
            errors.append({"field": field, "message": f"{field} is required"})
        return
    if len(value) > MAX_TEXT_LENGTH:
        errors.append({"field": field, "message": f"{field} must be 255 characters or less"})


def _check_dates(errors: list[dict[str, str]], payload: ProjectCreate | ProjectUpdate) -> None:
    if payload.start_date and payload.end_date and payload.end_date < payload.start_date:
        errors.append({"field": "endDate", "message": "endDate must be on or after startDate"})


def _code_taken(session: Session, code: str, team: str, *, exclude_id: UUID | None = None) -> bool:
    stmt = select(Project.id).where(col(Project.code) == code, col(Project.team) == team)
    if exclude_id is not None:
        stmt = stmt.where(col(Project.id) != exclude_id)
    return session.exec(stmt).first() is not None


def _breakdowns_of(session: Session, project_ids: list[UUID]) -> dict[UUID, list[SkillBreakdownItem]]:
    grouped: dict[UUID, list[SkillBreakdownItem]] = defaultdict(list)
    if not project_ids:
        return grouped
    rows = session.exec(
        select(ProjectSkillBreakdown)
        .where(col(ProjectSkillBreakdown.project_id).in_(project_ids))
        .order_by(col(ProjectSkillBreakdown.year).asc(), col(ProjectSkillBreakdown.month).asc())
    ).all()
    for row in rows:
        grouped[row.project_id].append(SkillBreakdownItem.model_validate(row.model_dump()))
    return grouped


def _assignments_of(
    session: Session, project_ids: list[UUID], *, with_resource: bool = False
) -> dict[UUID, list[ProjectAssignmentItem]]:
    grouped: dict[UUID, list[ProjectAssignmentItem]] = defaultdict(list)
    if not project_ids:
        return grouped
    stmt = (
        select(Assignment, Resource)
        .join(Resource, col(Assignment.resource_id) == col(Resource.id), isouter=True)
        .where(col(Assignment.project_id).in_(project_ids))
        .order_by(col(Assignment.year).asc(), col(Assignment.month).asc())
    )
    for assignment, resource in session.exec(stmt).all():
        data: dict[str, Any] = assignment.model_dump()
        if with_resource and resource is not None:
            data["resource"] = ResourceContact.model_validate(resource.model_dump())
        grouped[assignment.project_id].append(ProjectAssignmentItem.model_validate(data))
    return grouped


def _totals(
    breakdowns: list[SkillBreakdownItem], assignments: list[ProjectAssignmentItem]
) -> tuple[float, float, int]:
    committed = sum(float(b.hours) for b in breakdowns)
    assigned = sum(float(a.hours) for a in assignments)
    resources = {a.resource_id for a in assignments if a.resource_id}
    return committed, assigned, len(resources)


def list_projects(session: Session, filters: ProjectFilters) -> list[ProjectListItem]:
    stmt = select(Project)
    if filters.type:
        stmt = stmt.where(col(Project.type) == filters.type)
    if filters.status is not None:
        stmt = stmt.where(col(Project.status) == filters.status)
    if filters.domain is not None:
        stmt = stmt.where(col(Project.domain) == filters.domain)
    if filters.priority:
        stmt = stmt.where(col(Project.priority) == filters.priority)
    if filters.team:
        stmt = stmt.where(col(Project.team) == filters.team)
    projects = session.exec(stmt.order_by(col(Project.created_at).desc())).all()

    ids = [p.id for p in projects]
    breakdowns = _breakdowns_of(session, ids)
    assignments = _assignments_of(session, ids)

    items: list[ProjectListItem] = []
    for project in projects:
        own_breakdowns = breakdowns.get(project.id, [])
        own_assignments = assignments.get(project.id, [])
        committed, assigned, resource_count = _totals(own_breakdowns, own_assignments)
        items.append(
            ProjectListItem.model_validate(
                {
                    **project.model_dump(),
                    "project_skill_breakdowns": own_breakdowns,
                    "assignments": own_assignments,
                    "total_committed_hours": committed,
                    "total_assigned_hours": assigned,
                    "assigned_resources_count": resource_count,
                }
            )
        )
    return items


def get_project(session: Session, project_id: UUID) -> ProjectDetail:
    project = crud.get_or_404(session, Project, project_id, entity="Project")
    own_breakdowns = _breakdowns_of(session, [project.id]).get(project.id, [])
    own_assignments = _assignments_of(session, [project.id], with_resource=True).get(project.id, [])
    committed, assigned, resource_count = _totals(own_breakdowns, own_assignments)
    completion = round_half_up(assigned / committed * 100) if committed > 0 else 0
    return ProjectDetail.model_validate(
        {
            **project.model_dump(),
            "project_skill_breakdowns": own_breakdowns,
            "assignments": own_assignments,
            "metrics": ProjectMetrics(
                total_committed_hours=committed,
                total_assigned_hours=assigned,
                assigned_resources_count=resource_count,
                completion_percentage=completion,
            ),
        }
    )


def create_project(session: Session, payload: ProjectCreate) -> ProjectRead:
    errors: list[dict[str, str]] = []
    _check_text(errors, "code", payload.code, required=True)
    _check_text(errors, "title", payload.title, required=True)
    _check_text(errors, "team", payload.team, required=True)
    _check_dates(errors, payload)
    if errors:
        raise ValidationError("Validation failed", errors=errors)

    if _code_taken(session, payload.code, payload.team):
        raise ConflictError(f"Project with code '{payload.code}' already exists for team '{payload.team}'")

    data = payload.model_dump()
    if not (data.get("type") or "").strip():
        data["type"] = None
    project = Project(**data)
    session.add(project)
    try:
        session.commit()
    except IntegrityError as exc:
        # (code, team) is unique at the database level too.
        session.rollback()
        raise ConflictError(
            f"Project with code '{payload.code}' already exists for team '{payload.team}'"
        ) from exc

    session.refresh(project)
    logger.info("project.created id=%s code=%s team=%s", project.id, project.code, project.team)
    return ProjectRead.model_validate(project.model_dump())


def update_project(session: Session, project_id: UUID, payload: ProjectUpdate) -> ProjectRead:
    data = payload.model_dump(exclude_unset=True)
    errors: list[dict[str, str]] = []
    for field in ("code", "title", "team"):
        if field in data and data[field] is not None:
            _check_text(errors, field, data[field], required=True)
    _check_dates(errors, payload)
    if errors:
        raise ValidationError("Validation failed", errors=errors)

    project = crud.get_or_404(session, Project, project_id, entity="Project")

    changes = {
        k: v for k, v in data.items() if k in UPDATABLE_FIELDS and (v not in (None, "") or k in _NULLABLE_FIELDS)
    }
    if not changes:
        raise ValidationError("No fields to update")

    code = changes.get("code", project.code)
    team = changes.get("team", project.team)
    if (code, team) != (project.code, project.team) and _code_taken(session, code, team, exclude_id=project.id):
        raise ConflictError(f"Project with code '{code}' already exists for team '{team}'")

    crud.apply_patch(project, changes, allowed=UPDATABLE_FIELDS)
    session.add(project)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError(f"Project with code '{code}' already exists for team '{team}'") from exc

    session.refresh(project)
    logger.info("project.updated id=%s fields=%s", project.id, ",".join(sorted(changes)))
    return ProjectRead.model_validate(project.model_dump())


def delete_project(session: Session, project_id: UUID) -> None:
    project = crud.get_or_404(session, Project, project_id, entity="Project")

    # Dependents first: assignments and breakdowns reference the project.
    session.execute(delete(Assignment).where(col(Assignment.project_id) == project.id))
    session.execute(delete(ProjectSkillBreakdown).where(col(ProjectSkillBreakdown.project_id) == project.id))
    session.delete(project)
    session.commit()
    logger.info("project.deleted id=%s", project_id)
