"""Assignment validation and persistence.

``validate_assignment`` runs every gate in a fixed order and stops at the first
failure; ``create_assignment`` only writes once validation has passed.

Known gaps, kept deliberately:

* Only date-based requests are checked against daily capacity; month/year
  requests are accepted without a capacity check.
* ``update_assignment`` does not re-run the capacity check when hours or the
  resource change.
* The capacity check and the insert are separate statements, so two
  concurrent requests for the same resource and day can both pass the check.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, func
from sqlmodel import Session, col, select

from app.core.errors import BusinessRuleError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.db import crud
from app.models.assignments import Assignment
from app.models.projects import Project
from app.models.resources import Resource
from app.schemas.assignments import (
    AssignmentCreate,
    AssignmentDetail,
    AssignmentFull,
    AssignmentListItem,
    AssignmentUpdate,
)
from app.schemas.refs import ProjectBrief, ProjectRef, ResourceBrief, ResourceRef
from app.services.capacity import (
    NO_ABSENCES,
    WORKING_DAYS_PER_MONTH,
    AbsenceProvider,
    assigned_hours_on,
    daily_capacity,
)

logger = get_logger(__name__)

INACTIVE_RESOURCE = "INACTIVE_RESOURCE"
DAILY_CAPACITY_EXCEEDED = "DAILY_CAPACITY_EXCEEDED"

# Columns an update may touch; anything else in a patch is ignored.
UPDATABLE_FIELDS = ("title", "description", "skill_name", "month", "year", "hours", "resource_id")
_NULLABLE_UPDATE_FIELDS = frozenset({"description", "skill_name", "resource_id"})


@dataclass(frozen=True, slots=True)
class AssignmentFilters:
    project_id: UUID | None = None
    resource_id: UUID | None = None
    month: int | None = None
    year: int | None = None
    skill_name: str | None = None
    team: str | None = None


@dataclass(frozen=True, slots=True)
class ValidatedAssignment:
    project: Project
    resource: Resource | None
    day: date | None
    month: int
    year: int
    hours: float


def _hours(value: float) -> str:
    return f"{value:g}"


def _time_reference(request: AssignmentCreate) -> tuple[date | None, int, int]:
    if request.date is not None:
        return request.date, request.date.month, request.date.year
    if request.month and request.year:
        if not 1 <= request.month <= 12:
            raise ValidationError("month must be between 1 and 12")
        return None, request.month, request.year
    raise ValidationError("Either date or (month and year) is required")


def _check_daily_capacity(
    session: Session,
    *,
    resource: Resource,
    project_id: UUID,
    day: date,
    hours: float,
    absences: AbsenceProvider,
    working_days: int,
) -> None:
    # Hours already on the same project are a reassignment, not extra load.
    assigned = assigned_hours_on(session, resource.id, day, exclude_project_id=project_id)
    absence = absences.absence_hours(resource, day)
    capacity = daily_capacity(resource, day, absences, working_days=working_days)

    if assigned + hours > capacity:
        logger.info(
            "assignment.capacity.exceeded resource_id=%s date=%s assigned=%s requested=%s capacity=%s",
            resource.id,
            day.isoformat(),
            assigned,
            hours,
            capacity,
        )
        raise BusinessRuleError(
            f"Assignment would exceed daily resource capacity for {day.isoformat()}. "
            f"Available: {_hours(capacity - assigned)} hours, "
            f"Requested: {_hours(hours)} hours, "
            f"Assigned: {_hours(assigned)} hours, "
            f"Absences: {_hours(absence)} hours",
            DAILY_CAPACITY_EXCEEDED,
        )


def validate_assignment(
    session: Session,
    request: AssignmentCreate,
    *,
    absences: AbsenceProvider = NO_ABSENCES,
    working_days: int = WORKING_DAYS_PER_MONTH,
) -> ValidatedAssignment:
    """Check a proposed assignment. Read-only; raises on the first failing rule."""
    if request.project_id is None:
        raise ValidationError("projectId is required")
    if not request.title:
        raise ValidationError("title is required")
    if request.hours is None or request.hours <= 0:
        raise ValidationError("hours must be greater than 0")

    day, month, year = _time_reference(request)

    project = session.get(Project, request.project_id)
    if project is None:
        raise NotFoundError("Project", request.project_id)

    resource: Resource | None = None
    if request.resource_id is not None:
        resource = session.get(Resource, request.resource_id)
        if resource is None:
            raise NotFoundError("Resource", request.resource_id)
        if not resource.active:
            raise BusinessRuleError(
                "Cannot assign inactive resource to project",
                INACTIVE_RESOURCE,
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        if day is not None:
            _check_daily_capacity(
                session,
                resource=resource,
                project_id=project.id,
                day=day,
                hours=request.hours,
                absences=absences,
                working_days=working_days,
            )

    return ValidatedAssignment(
        project=project,
        resource=resource,
        day=day,
        month=month,
        year=year,
        hours=request.hours,
    )


def create_assignment(
    session: Session,
    request: AssignmentCreate,
    *,
    absences: AbsenceProvider = NO_ABSENCES,
    working_days: int = WORKING_DAYS_PER_MONTH,
) -> AssignmentDetail:
    checked = validate_assignment(session, request, absences=absences, working_days=working_days)

    assignment = Assignment(
        project_id=checked.project.id,
        resource_id=checked.resource.id if checked.resource else None,
        title=request.title,
        description=request.description,
        skill_name=request.skill_name,
        team=request.team,
        date=checked.day,
        month=checked.month,
        year=checked.year,
        hours=checked.hours,
    )
    crud.save(session, assignment)
    logger.info(
        "assignment.created id=%s project_id=%s resource_id=%s hours=%s",
        assignment.id,
        assignment.project_id,
        assignment.resource_id,
        assignment.hours,
    )
    return get_assignment_detail(session, assignment.id)


def get_assignment_detail(session: Session, assignment_id: UUID) -> AssignmentDetail:
    assignment = crud.get_or_404(session, Assignment, assignment_id, entity="Assignment")
    project = session.get(Project, assignment.project_id)
    resource = session.get(Resource, assignment.resource_id) if assignment.resource_id else None
    return AssignmentDetail.model_validate(
        {
            **assignment.model_dump(),
            "project": ProjectRef.model_validate(project.model_dump()) if project else None,
            "resource": ResourceRef.model_validate(resource.model_dump()) if resource else None,
        }
    )


def get_assignment(session: Session, assignment_id: UUID) -> AssignmentFull:
    assignment = crud.get_or_404(session, Assignment, assignment_id, entity="Assignment")
    project = session.get(Project, assignment.project_id)
    resource = session.get(Resource, assignment.resource_id) if assignment.resource_id else None
    return AssignmentFull.model_validate(
        {
            **assignment.model_dump(),
            "project": project.model_dump() if project else None,
            "resource": resource.model_dump() if resource else None,
        }
    )


def list_assignments(session: Session, filters: AssignmentFilters) -> list[AssignmentListItem]:
    stmt = select(Assignment, Project, Resource).join(
        Project, col(Assignment.project_id) == col(Project.id), isouter=True
    ).join(Resource, col(Assignment.resource_id) == col(Resource.id), isouter=True)

    if filters.project_id is not None:
        stmt = stmt.where(col(Assignment.project_id) == filters.project_id)
    if filters.resource_id is not None:
        stmt = stmt.where(col(Assignment.resource_id) == filters.resource_id)
    if filters.month is not None:
        stmt = stmt.where(col(Assignment.month) == filters.month)
    if filters.year is not None:
        stmt = stmt.where(col(Assignment.year) == filters.year)
    if filters.skill_name:
        stmt = stmt.where(col(Assignment.skill_name) == filters.skill_name)
    if filters.team:
        stmt = stmt.where(col(Resource.team) == filters.team)

    stmt = stmt.order_by(col(Assignment.year).desc(), col(Assignment.month).desc())

    items: list[AssignmentListItem] = []
    for assignment, project, resource in session.exec(stmt).all():
        items.append(
            AssignmentListItem.model_validate(
                {
                    **assignment.model_dump(),
                    "project": ProjectBrief.model_validate(project.model_dump()) if project else None,
                    "resource": ResourceBrief.model_validate(resource.model_dump()) if resource else None,
                }
            )
        )
    return items


def _clean_patch(payload: AssignmentUpdate) -> dict[str, Any]:
    data = payload.model_dump(exclude_unset=True)
    changes: dict[str, Any] = {}
    for key, value in data.items():
        if value is None and key not in _NULLABLE_UPDATE_FIELDS:
            continue
        changes[key] = value

    if "title" in changes and not changes["title"]:
        changes.pop("title")
    if "hours" in changes and changes["hours"] <= 0:
        raise ValidationError("hours must be greater than 0")
    if "month" in changes and not 1 <= changes["month"] <= 12:
        raise ValidationError("month must be between 1 and 12")
    return changes


def update_assignment(session: Session, assignment_id: UUID, payload: AssignmentUpdate) -> AssignmentDetail:
    assignment = crud.get_or_404(session, Assignment, assignment_id, entity="Assignment")

    changes = _clean_patch(payload)
    if not changes:
        raise ValidationError("No fields to update")

    resource_id = changes.get("resource_id")
    if resource_id is not None and session.get(Resource, resource_id) is None:
        raise NotFoundError("Resource", resource_id)

    applied = crud.apply_patch(assignment, changes, allowed=UPDATABLE_FIELDS)
    crud.save(session, assignment)
    logger.info("assignment.updated id=%s fields=%s", assignment.id, ",".join(sorted(applied)))
    return get_assignment_detail(session, assignment.id)


def delete_assignment(session: Session, assignment_id: UUID) -> None:
    assignment = crud.get_or_404(session, Assignment, assignment_id, entity="Assignment")
    session.delete(assignment)
    session.commit()
    logger.info("assignment.deleted id=%s", assignment_id)


def delete_project_assignments(session: Session, project_id: UUID) -> int:
    count = session.exec(
        select(func.count()).select_from(Assignment).where(col(Assignment.project_id) == project_id)
    ).one()
    logger.info("assignment.bulk_delete.start project_id=%s count=%s", project_id, count)
    session.execute(delete(Assignment).where(col(Assignment.project_id) == project_id))
    session.commit()
    logger.info("assignment.bulk_delete.done project_id=%s deleted=%s", project_id, count)
    return int(count)

