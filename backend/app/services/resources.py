from __future__ import annotations

import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.db import crud
from app.models.assignments import Assignment
from app.models.capacity import Capacity
from app.models.projects import Project
from app.models.resources import Resource, ResourceSkill
from app.schemas.resources import (
    CapacityItem,
    ResourceAssignmentItem,
    ResourceCreate,
    ResourceDetail,
    ResourceListItem,
    ResourceMetrics,
    ResourceUpdate,
    ResourceWithSkills,
    SkillIn,
    SkillRead,
)
from app.schemas.refs import ProjectBrief
from app.services.config_resolver import DEFAULT_MAX_RESOURCE_HOURS, get_max_resource_hours

logger = get_logger(__name__)

MAX_TEXT_LENGTH = 255
DEFAULT_CAPACITY = 160

UPDATABLE_FIELDS = ("code", "name", "email", "team", "default_capacity", "active")


@dataclass(frozen=True, slots=True)
class ResourceFilters:
    active: bool | None = None
    skill: str | None = None
    team: str | None = None


def generate_code(name: str, *, now_ms: int | None = None) -> str:
    """Initials of ``name`` followed by the last four digits of the epoch millis."""
    initials = "".join(part[0].upper() for part in name.strip().split() if part)
    stamp = str(now_ms if now_ms is not None else int(time.time() * 1000))[-4:]
    return f"{initials}{stamp}"


def _unique_code(session: Session, base: str) -> str:
    code = base
    suffix = 1
    while session.exec(select(Resource.id).where(col(Resource.code) == code)).first() is not None:
        code = f"{base}{suffix}"
        suffix += 1
    return code


def _email_taken(session: Session, email: str, team: str | None, *, exclude_id: UUID | None = None) -> bool:
    stmt = select(Resource.id).where(col(Resource.email) == email, col(Resource.team) == team)
    if exclude_id is not None:
        stmt = stmt.where(col(Resource.id) != exclude_id)
    return session.exec(stmt).first() is not None


def _validate_email(email: str | None, errors: list[dict[str, str]]) -> None:
    if email is None or not email.strip():
        return
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        errors.append({"field": "email", "message": "Invalid email format"})
    if len(email) > MAX_TEXT_LENGTH:
        errors.append({"field": "email", "message": "Email must be 255 characters or less"})


def _validate_capacity(value: int | None, max_hours: int, errors: list[dict[str, str]]) -> None:
    if value is None:
        return
    if value < 0:
        errors.append({"field": "defaultCapacity", "message": "Default capacity must be non-negative"})
    if value > max_hours:
        errors.append({"field": "defaultCapacity", "message": f"Default capacity cannot exceed {max_hours} hours"})


def _skills_of(session: Session, resource_ids: list[UUID]) -> dict[UUID, list[SkillRead]]:
    grouped: dict[UUID, list[SkillRead]] = defaultdict(list)
    if not resource_ids:
        return grouped
    rows = session.exec(
        select(ResourceSkill)
        .where(col(ResourceSkill.resource_id).in_(resource_ids))
        .order_by(col(ResourceSkill.skill_name).asc())
    ).all()
    for row in rows:
        grouped[row.resource_id].append(SkillRead(skill_name=row.skill_name, proficiency=row.proficiency))
    return grouped


def _capacities_of(session: Session, resource_ids: list[UUID]) -> dict[UUID, list[CapacityItem]]:
    grouped: dict[UUID, list[CapacityItem]] = defaultdict(list)
    if not resource_ids:
        return grouped
    rows = session.exec(
        select(Capacity)
        .where(col(Capacity.resource_id).in_(resource_ids))
        .order_by(col(Capacity.year).asc(), col(Capacity.month).asc())
    ).all()
    for row in rows:
        grouped[row.resource_id].append(CapacityItem.model_validate(row.model_dump()))
    return grouped


def _assignments_of(
    session: Session, resource_ids: list[UUID], *, with_project: bool = False
) -> dict[UUID, list[ResourceAssignmentItem]]:
    grouped: dict[UUID, list[ResourceAssignmentItem]] = defaultdict(list)
    if not resource_ids:
        return grouped
    stmt = (
        select(Assignment, Project)
        .join(Project, col(Assignment.project_id) == col(Project.id), isouter=True)
        .where(col(Assignment.resource_id).in_(resource_ids))
        .order_by(col(Assignment.year).asc(), col(Assignment.month).asc())
    )
    for assignment, project in session.exec(stmt).all():
        data: dict[str, Any] = assignment.model_dump()
        if with_project and project is not None:
            data["project"] = ProjectBrief.model_validate(project.model_dump())
        grouped[assignment.resource_id].append(ResourceAssignmentItem.model_validate(data))
    return grouped


def _totals(assignments: list[ResourceAssignmentItem]) -> tuple[float, int]:
    total = sum(float(a.hours) for a in assignments)
    projects = {a.project_id for a in assignments if a.project_id}
    return total, len(projects)


def _with_skills(session: Session, resource: Resource) -> ResourceWithSkills:
    skills = _skills_of(session, [resource.id])
    return ResourceWithSkills.model_validate(
        {**resource.model_dump(), "resource_skills": skills.get(resource.id, [])}
    )


def list_resources(session: Session, filters: ResourceFilters) -> list[ResourceListItem]:
    stmt = select(Resource)
    if filters.active is not None:
        stmt = stmt.where(col(Resource.active).is_(filters.active))
    if filters.team:
        stmt = stmt.where(col(Resource.team) == filters.team)
    if filters.skill:
        with_skill = select(ResourceSkill.resource_id).where(col(ResourceSkill.skill_name) == filters.skill)
        stmt = stmt.where(col(Resource.id).in_(with_skill))
    resources = session.exec(stmt.order_by(col(Resource.name).asc())).all()

    ids = [r.id for r in resources]
    skills = _skills_of(session, ids)
    capacities = _capacities_of(session, ids)
    assignments = _assignments_of(session, ids)

    items: list[ResourceListItem] = []
    for resource in resources:
        own = assignments.get(resource.id, [])
        total, project_count = _totals(own)
        items.append(
            ResourceListItem.model_validate(
                {
                    **resource.model_dump(),
                    "resource_skills": skills.get(resource.id, []),
                    "assignments": own,
                    "capacities": capacities.get(resource.id, []),
                    "skills_count": len(skills.get(resource.id, [])),
                    "total_assigned_hours": total,
                    "active_projects_count": project_count,
                }
            )
        )
    return items


def get_resource(session: Session, resource_id: UUID) -> ResourceDetail:
    resource = crud.get_or_404(session, Resource, resource_id, entity="Resource")
    skills = _skills_of(session, [resource.id]).get(resource.id, [])
    own = _assignments_of(session, [resource.id], with_project=True).get(resource.id, [])
    total, project_count = _totals(own)
    return ResourceDetail.model_validate(
        {
            **resource.model_dump(),
            "resource_skills": skills,
            "assignments": own,
            "capacities": _capacities_of(session, [resource.id]).get(resource.id, []),
            "metrics": ResourceMetrics(
                total_assigned_hours=total,
                active_projects_count=project_count,
                skills_count=len(skills),
            ),
        }
    )


def _add_skills(session: Session, resource_id: UUID, skills: list[SkillIn]) -> None:
    for skill in skills:
        session.add(ResourceSkill(resource_id=resource_id, skill_name=skill.skill_name, proficiency=skill.proficiency))


def create_resource(
    session: Session,
    payload: ResourceCreate,
    *,
    default_max_hours: int = DEFAULT_MAX_RESOURCE_HOURS,
    default_capacity: int = DEFAULT_CAPACITY,
) -> ResourceWithSkills:
    errors: list[dict[str, str]] = []
    name = (payload.name or "").strip()
    if not name:
        errors.append({"field": "name", "message": "Resource name is required"})
    elif len(name) > MAX_TEXT_LENGTH:
        errors.append({"field": "name", "message": "Resource name must be 255 characters or less"})
    if not payload.team or not payload.team.strip():
        errors.append({"field": "team", "message": "Team is required"})
    _validate_email(payload.email, errors)
    max_hours = get_max_resource_hours(session, default=default_max_hours)
    _validate_capacity(payload.default_capacity, max_hours, errors)
    if errors:
        raise ValidationError("Validation failed", errors=errors)

    code = _unique_code(session, payload.code or generate_code(name))

    email = payload.email if payload.email and payload.email.strip() else None
    if email and _email_taken(session, email, payload.team):
        raise ConflictError(f"A record with this email already exists in team {payload.team}")

    resource = Resource(
        code=code,
        name=name,
        email=email,
        team=payload.team,
        default_capacity=payload.default_capacity if payload.default_capacity is not None else default_capacity,
        active=payload.active,
    )
    session.add(resource)
    try:
        session.flush()
        _add_skills(session, resource.id, payload.skills)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError("Resource create violates constraints") from exc

    session.refresh(resource)
    logger.info("resource.created id=%s code=%s team=%s", resource.id, resource.code, resource.team)
    return _with_skills(session, resource)


def _update_errors(payload: ResourceUpdate, data: dict[str, Any], max_hours: int) -> list[dict[str, str]]:
    errors: list[dict[str, str]] = []
    if "name" in data:
        if not payload.name or not payload.name.strip():
            errors.append({"field": "name", "message": "Resource name cannot be empty"})
        elif len(payload.name) > MAX_TEXT_LENGTH:
            errors.append({"field": "name", "message": "Resource name must be 255 characters or less"})
    if "email" in data:
        _validate_email(payload.email, errors)
    if "team" in data and (not payload.team or not payload.team.strip()):
        errors.append({"field": "team", "message": "Team cannot be empty"})
    if "default_capacity" in data:
        _validate_capacity(payload.default_capacity, max_hours, errors)
    return errors


def update_resource(
    session: Session,
    resource_id: UUID,
    payload: ResourceUpdate,
    *,
    default_max_hours: int = DEFAULT_MAX_RESOURCE_HOURS,
) -> ResourceWithSkills:
    data = payload.model_dump(exclude_unset=True)
    max_hours = get_max_resource_hours(session, default=default_max_hours)
    errors = _update_errors(payload, data, max_hours)
    if errors:
        raise ValidationError("Validation failed", errors=errors)

    resource = crud.get_or_404(session, Resource, resource_id, entity="Resource")

    if payload.code and payload.code != resource.code:
        clash = session.exec(select(Resource.id).where(col(Resource.code) == payload.code)).first()
        if clash is not None:
            raise ConflictError(f"Resource with code '{payload.code}' already exists")

    if payload.email and payload.email.strip():
        team = payload.team or resource.team
        if _email_taken(session, payload.email, team, exclude_id=resource.id):
            raise ConflictError(f"A record with this email already exists in team {team}")

    changes = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
    # Blank code/name/team keep the stored value; null capacity/active are ignored.
    for key in ("code", "name", "team", "default_capacity", "active"):
        if key in changes and changes[key] in (None, ""):
            changes.pop(key)

    if payload.skills is not None:
        session.execute(delete(ResourceSkill).where(col(ResourceSkill.resource_id) == resource.id))
        _add_skills(session, resource.id, payload.skills)
        logger.info("resource.skills.replaced id=%s count=%d", resource.id, len(payload.skills))

    crud.apply_patch(resource, changes, allowed=UPDATABLE_FIELDS)
    session.add(resource)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError("Resource update violates constraints") from exc

    session.refresh(resource)
    logger.info("resource.updated id=%s fields=%s", resource.id, ",".join(sorted(changes)))
    return _with_skills(session, resource)


def delete_resource(session: Session, resource_id: UUID) -> None:
    resource = session.get(Resource, resource_id)
    if resource is None:
        raise NotFoundError("Resource", resource_id)

    # Dependents go first; not every database enforces the cascade.
    session.execute(delete(ResourceSkill).where(col(ResourceSkill.resource_id) == resource_id))
    session.execute(delete(Capacity).where(col(Capacity.resource_id) == resource_id))
    session.execute(delete(Assignment).where(col(Assignment.resource_id) == resource_id))
    session.delete(resource)
    session.commit()
    logger.info("resource.deleted id=%s", resource_id)


def list_skills(session: Session, team: str | None = None) -> list[dict[str, Any]]:
    """Distinct skill names held by active resources, with a holder count."""
    stmt = (
        select(ResourceSkill.skill_name, func.count(col(ResourceSkill.resource_id)))
        .join(Resource, col(Resource.id) == col(ResourceSkill.resource_id))
        .where(col(Resource.active).is_(True))
    )
    if team:
        stmt = stmt.where(col(Resource.team) == team)
    stmt = stmt.group_by(col(ResourceSkill.skill_name)).order_by(col(ResourceSkill.skill_name).asc())
    return [{"name": name, "resource_count": count} for name, count in session.exec(stmt).all()]
