"""Monthly capacity records and the team capacity overview."""

from __future__ import annotations

import math
from collections import defaultdict
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from app.core.errors import BusinessRuleError, NotFoundError
from app.core.logging import get_logger
from app.core.time import utcnow
from app.db import crud
from app.models.assignments import Assignment
from app.models.capacity import Capacity
from app.models.projects import Project
from app.models.resources import Resource, ResourceSkill
from app.schemas.capacity import (
    CapacityAssignment,
    CapacityDetail,
    CapacityPage,
    CapacityRead,
    CapacityUpsert,
    Pagination,
)
from app.schemas.refs import ProjectRef, ResourceBrief
from app.services.capacity import (
    WORKING_DAYS_PER_MONTH,
    assigned_hours_in_month,
    round_half_up,
    utilization,
    working_days_in_month,
)

logger = get_logger(__name__)

INACTIVE_RESOURCE = "INACTIVE_RESOURCE"
CAPACITY_BELOW_ASSIGNED = "CAPACITY_BELOW_ASSIGNED"

# Assignments to projects with this code prefix are time off, not work.
ABSENCE_PROJECT_PREFIX = "ABSENCES"
SKILL_ORDER = ("Project Management", "Análisis", "Diseño", "Construcción", "QA", "General")
MONTHS = range(1, 13)


def _capacity_read(session: Session, capacity: Capacity, resource: Resource | None) -> CapacityRead:
    assigned = assigned_hours_in_month(session, capacity.resource_id, capacity.month, capacity.year)
    total = float(capacity.total_hours)
    return CapacityRead.model_validate(
        {
            **capacity.model_dump(),
            "total_hours": total,
            "assigned_hours": assigned,
            "available_hours": total - assigned,
            "utilization_percentage": utilization(assigned, total),
            "resource": ResourceBrief.model_validate(resource.model_dump()) if resource else None,
        }
    )


def list_capacity(
    session: Session,
    *,
    resource_id: UUID | None = None,
    month: int | None = None,
    year: int | None = None,
    page: int = 1,
    limit: int = 20,
) -> CapacityPage:
    conditions = []
    if resource_id is not None:
        conditions.append(col(Capacity.resource_id) == resource_id)
    if month is not None:
        conditions.append(col(Capacity.month) == month)
    if year is not None:
        conditions.append(col(Capacity.year) == year)

    total = session.exec(select(func.count()).select_from(Capacity).where(*conditions)).one()
    stmt = (
        select(Capacity, Resource)
        .join(Resource, col(Capacity.resource_id) == col(Resource.id), isouter=True)
        .where(*conditions)
        .order_by(col(Capacity.year).desc(), col(Capacity.month).desc(), col(Resource.name).asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = [_capacity_read(session, capacity, resource) for capacity, resource in session.exec(stmt).all()]
    return CapacityPage(
        capacities=rows,
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)),
    )


def get_capacity(session: Session, capacity_id: UUID) -> CapacityDetail:
    capacity = crud.get_or_404(session, Capacity, capacity_id, entity="Capacity")
    resource = session.get(Resource, capacity.resource_id)

    stmt = (
        select(Assignment, Project)
        .join(Project, col(Assignment.project_id) == col(Project.id), isouter=True)
        .where(
            col(Assignment.resource_id) == capacity.resource_id,
            col(Assignment.month) == capacity.month,
            col(Assignment.year) == capacity.year,
        )
    )
    assignments = [
        CapacityAssignment(
            id=assignment.id,
            project=ProjectRef.model_validate(project.model_dump()) if project else None,
            skill_name=assignment.skill_name,
            hours=float(assignment.hours),
        )
        for assignment, project in session.exec(stmt).all()
    ]

    assigned = sum(a.hours for a in assignments)
    total = float(capacity.total_hours)
    return CapacityDetail.model_validate(
        {
            **capacity.model_dump(),
            "total_hours": total,
            "assigned_hours": assigned,
            "available_hours": total - assigned,
            "utilization_percentage": utilization(assigned, total),
            "resource": ResourceBrief.model_validate(resource.model_dump()) if resource else None,
            "assignments": assignments,
        }
    )


def upsert_capacity(session: Session, payload: CapacityUpsert) -> CapacityRead:
    resource = session.get(Resource, payload.resource_id)
    if resource is None:
        raise NotFoundError("Resource", payload.resource_id)
    if not resource.active:
        raise BusinessRuleError("Cannot set capacity for inactive resource", INACTIVE_RESOURCE)

    assigned = assigned_hours_in_month(session, resource.id, payload.month, payload.year)
    if payload.total_hours < assigned:
        raise BusinessRuleError(
            f"Cannot set capacity to {payload.total_hours:g} hours. Resource already has "
            f"{assigned:g} hours assigned for {payload.month}/{payload.year}",
            CAPACITY_BELOW_ASSIGNED,
        )

    capacity = session.exec(
        select(Capacity).where(
            col(Capacity.resource_id) == resource.id,
            col(Capacity.month) == payload.month,
            col(Capacity.year) == payload.year,
        )
    ).first()
    if capacity is None:
        capacity = Capacity(
            resource_id=resource.id,
            month=payload.month,
            year=payload.year,
            total_hours=payload.total_hours,
        )
    else:
        capacity.total_hours = payload.total_hours
        capacity.updated_at = utcnow()
    crud.save(session, capacity)
    logger.info(
        "capacity.upserted resource_id=%s month=%s year=%s total_hours=%s",
        resource.id,
        payload.month,
        payload.year,
        payload.total_hours,
    )
    return _capacity_read(session, capacity, resource)


def _month_of(assignment: Assignment) -> tuple[int, int] | None:
    if assignment.date is not None:
        return assignment.date.month, assignment.date.year
    if assignment.month and assignment.year:
        return assignment.month, assignment.year
    return None


def _monthly_data(
    resource: Resource,
    year: int,
    by_month: dict[int, list[dict[str, Any]]],
    *,
    working_days: int = WORKING_DAYS_PER_MONTH,
) -> list[dict[str, Any]]:
    daily_base = resource.default_capacity / working_days
    data: list[dict[str, Any]] = []
    for month in MONTHS:
        entries = by_month.get(month, [])
        base_hours = daily_base * working_days_in_month(year, month)
        absence = sum(
            e["hours"] for e in entries if (e["projectCode"] or "").startswith(ABSENCE_PROJECT_PREFIX)
        )
        committed = sum(
            e["hours"] for e in entries if not (e["projectCode"] or "").startswith(ABSENCE_PROJECT_PREFIX)
        )
        total = max(0.0, base_hours - absence)
        available = max(0.0, total - committed)
        data.append(
            {
                "month": month,
                "totalHours": round_half_up(total),
                "committedHours": committed,
                "availableHours": round_half_up(available),
                "utilizationRate": utilization(committed, total),
                "assignments": entries,
            }
        )
    return data


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0


def build_capacity_overview(
    session: Session,
    team: str,
    *,
    year: int | None = None,
    today: date | None = None,
    working_days: int = WORKING_DAYS_PER_MONTH,
) -> dict[str, Any]:
    """Per-resource monthly load for ``team`` plus the dashboard KPIs and charts."""
    today = today or utcnow().date()
    year = year or today.year
    current_month = today.month

    resources = session.exec(
        select(Resource)
        .where(col(Resource.team) == team, col(Resource.active).is_(True))
        .order_by(col(Resource.name).asc())
    ).all()
    ids = [r.id for r in resources]

    skills: dict[UUID, list[dict[str, Any]]] = defaultdict(list)
    by_resource: dict[UUID, dict[int, list[dict[str, Any]]]] = defaultdict(lambda: defaultdict(list))
    if ids:
        for skill in session.exec(
            select(ResourceSkill)
            .where(col(ResourceSkill.resource_id).in_(ids))
            .order_by(col(ResourceSkill.skill_name).asc())
        ).all():
            skills[skill.resource_id].append({"name": skill.skill_name, "proficiency": skill.proficiency})

        stmt = (
            select(Assignment, Project)
            .join(Project, col(Assignment.project_id) == col(Project.id), isouter=True)
            .where(
                col(Assignment.resource_id).in_(ids),
                or_(
                    col(Assignment.year) == year,
                    col(Assignment.date).between(date(year, 1, 1), date(year, 12, 31)),
                ),
            )
        )
        for assignment, project in session.exec(stmt).all():
            when = _month_of(assignment)
            if when is None or when[1] != year:
                continue
            by_resource[assignment.resource_id][when[0]].append(
                {
                    "projectId": assignment.project_id,
                    "projectCode": project.code if project else None,
                    "projectTitle": project.title if project else None,
                    "projectType": project.type if project else None,
                    "skillName": assignment.skill_name,
                    "team": assignment.team,
                    "hours": float(assignment.hours),
                }
            )

    rows: list[dict[str, Any]] = []
    for resource in resources:
        monthly = _monthly_data(resource, year, by_resource.get(resource.id, {}), working_days=working_days)
        upcoming = [m["utilizationRate"] for m in monthly if m["month"] >= current_month]
        rows.append(
            {
                "id": resource.id,
                "code": resource.code,
                "name": resource.name,
                "email": resource.email,
                "defaultCapacity": resource.default_capacity,
                "skills": skills.get(resource.id, []),
                "monthlyData": monthly,
                "avgUtilization": round_half_up(_mean(upcoming)),
                "hasFutureAssignment": any(m["committedHours"] > 0 for m in monthly),
            }
        )

    with_assignment = sum(1 for r in rows if r["hasFutureAssignment"])
    current_util = _mean([r["monthlyData"][current_month - 1]["utilizationRate"] for r in rows])
    future_util = _mean(
        [_mean([m["utilizationRate"] for m in r["monthlyData"] if m["month"] > current_month]) for r in rows]
    )

    monthly_comparison = [
        {
            "month": month,
            "committedHours": sum(r["monthlyData"][month - 1]["committedHours"] for r in rows),
            "availableHours": sum(r["monthlyData"][month - 1]["availableHours"] for r in rows),
        }
        for month in MONTHS
    ]

    availability: dict[str, dict[str, float]] = {}
    for r in rows:
        held = r["skills"]
        if not held:
            continue
        current_available = r["monthlyData"][current_month - 1]["availableHours"]
        future_available = sum(m["availableHours"] for m in r["monthlyData"] if m["month"] > current_month)
        for skill in held:
            slot = availability.setdefault(skill["name"], {"current": 0.0, "future": 0.0})
            slot["current"] += current_available / len(held)
            slot["future"] += future_available / len(held)

    skills_chart = [
        {
            "skill": name,
            "currentMonth": round_half_up(availability[name]["current"]),
            "futureMonths": round_half_up(availability[name]["future"]),
        }
        for name in SKILL_ORDER
        if name in availability
    ]

    return {
        "year": year,
        "currentMonth": current_month,
        "kpis": {
            "totalResources": len(rows),
            "resourcesWithAssignment": with_assignment,
            "resourcesWithoutAssignment": len(rows) - with_assignment,
            "avgUtilization": {
                "current": round_half_up(current_util),
                "future": round_half_up(future_util),
            },
        },
        "charts": {
            "monthlyComparison": monthly_comparison,
            "skillsAvailability": skills_chart,
        },
        "resources": rows,
    }
