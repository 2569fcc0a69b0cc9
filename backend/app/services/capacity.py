"""Capacity math for resources.

A resource stores a monthly ``default_capacity``; its daily allowance is that
figure spread over a fixed number of working days, minus recorded absences.
"""

from __future__ import annotations

import calendar
import math
from datetime import date
from typing import Protocol
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, col, select

from app.models.assignments import Assignment
from app.models.resources import Resource

WORKING_DAYS_PER_MONTH = 20


class AbsenceProvider(Protocol):
    def absence_hours(self, resource: Resource, day: date) -> float: ...


class NoAbsences:
    """Absence source used until absences are tracked; always reports zero."""

    def absence_hours(self, resource: Resource, day: date) -> float:
        return 0.0


NO_ABSENCES = NoAbsences()


def base_daily_capacity(default_capacity: int | float, working_days: int = WORKING_DAYS_PER_MONTH) -> int:
    return math.floor(default_capacity / working_days)


def daily_capacity(
    resource: Resource,
    day: date,
    absences: AbsenceProvider = NO_ABSENCES,
    *,
    working_days: int = WORKING_DAYS_PER_MONTH,
) -> float:
    base = base_daily_capacity(resource.default_capacity, working_days)
    return base - absences.absence_hours(resource, day)


def working_days_in_month(year: int, month: int) -> int:
    """Count Monday-to-Friday days in the given month."""
    _, days = calendar.monthrange(year, month)
    return sum(1 for d in range(1, days + 1) if date(year, month, d).weekday() < 5)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def utilization(assigned: float, total: float) -> int:
    return round_half_up(assigned / total * 100) if total > 0 else 0


def assigned_hours_on(
    session: Session,
    resource_id: UUID,
    day: date,
    *,
    exclude_project_id: UUID | None = None,
) -> float:
    """Sum of hours already booked for ``resource_id`` on ``day``."""
    stmt = select(func.coalesce(func.sum(Assignment.hours), 0)).where(
        col(Assignment.resource_id) == resource_id,
        col(Assignment.date) == day,
    )
    if exclude_project_id is not None:
        stmt = stmt.where(col(Assignment.project_id) != exclude_project_id)
    return float(session.exec(stmt).one())


def assigned_hours_in_month(session: Session, resource_id: UUID, month: int, year: int) -> float:
    stmt = select(func.coalesce(func.sum(Assignment.hours), 0)).where(
        col(Assignment.resource_id) == resource_id,
        col(Assignment.month) == month,
        col(Assignment.year) == year,
    )
    return float(session.exec(stmt).one())
