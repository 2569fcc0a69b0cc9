# ruff: noqa

from datetime import date
from uuid import uuid4

import pytest

from app.core.errors import BusinessRuleError, NotFoundError
from app.schemas.capacity import CapacityUpsert
from app.services.capacity_planning import (
    build_capacity_overview,
    get_capacity,
    list_capacity,
    upsert_capacity,
)
from factories import make_assignment, make_capacity, make_project, make_resource, make_skill


def _upsert(resource, total_hours, month=3, year=2026):
    return CapacityUpsert(resource_id=resource.id, month=month, year=year, total_hours=total_hours)


def test_upsert_creates_then_updates_the_same_row(session):
    resource = make_resource(session)
    make_assignment(session, make_project(session), resource, month=3, year=2026, hours=40)

    created = upsert_capacity(session, _upsert(resource, 150))
    updated = upsert_capacity(session, _upsert(resource, 160))

    assert updated.id == created.id
    assert updated.total_hours == 160
    assert updated.assigned_hours == 40
    assert updated.available_hours == 120
    assert updated.utilization_percentage == 25
    assert updated.resource.code == resource.code


def test_upsert_refuses_capacity_below_assigned_hours(session):
    resource = make_resource(session)
    make_assignment(session, make_project(session), resource, month=3, year=2026, hours=40)

    with pytest.raises(BusinessRuleError) as excinfo:
        upsert_capacity(session, _upsert(resource, 30))

    assert excinfo.value.code == "CAPACITY_BELOW_ASSIGNED"
    assert excinfo.value.status_code == 409
    assert excinfo.value.message == (
        "Cannot set capacity to 30 hours. Resource already has 40 hours assigned for 3/2026"
    )


def test_upsert_refuses_inactive_resource(session):
    resource = make_resource(session, active=False)

    with pytest.raises(BusinessRuleError) as excinfo:
        upsert_capacity(session, _upsert(resource, 100))
    assert excinfo.value.code == "INACTIVE_RESOURCE"
    assert excinfo.value.message == "Cannot set capacity for inactive resource"


def test_upsert_unknown_resource_is_not_found(session):
    with pytest.raises(NotFoundError):
        upsert_capacity(session, CapacityUpsert(resource_id=uuid4(), month=3, year=2026, total_hours=10))


def test_list_capacity_paginates(session):
    resource = make_resource(session)
    for month in (1, 2, 3):
        make_capacity(session, resource, month, 2026, 160)

    page = list_capacity(session, resource_id=resource.id, page=1, limit=2)

    assert [c.month for c in page.capacities] == [3, 2]
    assert page.pagination.total == 3
    assert page.pagination.total_pages == 2
    assert [c.month for c in list_capacity(session, page=2, limit=2).capacities] == [1]
    assert list_capacity(session, month=2).pagination.total == 1


def test_get_capacity_lists_the_month_assignments(session):
    resource = make_resource(session)
    project = make_project(session)
    make_assignment(session, project, resource, month=3, year=2026, hours=30, skill_name="QA")
    make_assignment(session, project, resource, month=4, year=2026, hours=99)
    capacity = make_capacity(session, resource, 3, 2026, 120)

    detail = get_capacity(session, capacity.id)

    assert detail.assigned_hours == 30
    assert detail.available_hours == 90
    assert detail.utilization_percentage == 25
    assert [(a.project.code, a.hours) for a in detail.assignments] == [("PRJ-1", 30)]


def test_overview_splits_absences_from_committed_hours(session):
    ana = make_resource(session)
    make_skill(session, ana, "QA")
    make_resource(session, code="IN0001", name="Inactive", active=False)
    make_resource(session, code="BI0001", name="Other team", team="BI")
    work = make_project(session)
    leave = make_project(session, code="ABSENCES-2026", title="Vacations")
    make_assignment(session, work, ana, month=3, year=2026, hours=40)
    make_assignment(session, leave, ana, month=3, year=2026, hours=8)
    make_assignment(session, work, ana, date=date(2025, 3, 2), hours=6)

    overview = build_capacity_overview(session, "SAP", today=date(2026, 3, 15))

    assert overview["year"] == 2026
    assert overview["currentMonth"] == 3
    assert [r["name"] for r in overview["resources"]] == ["Ana Garcia"]

    row = overview["resources"][0]
    march = row["monthlyData"][2]
    # 22 working days at 8h, minus one absence day.
    assert march["totalHours"] == 168
    assert march["committedHours"] == 40
    assert march["availableHours"] == 128
    assert march["utilizationRate"] == 24
    assert len(march["assignments"]) == 2
    assert row["monthlyData"][1]["committedHours"] == 0
    assert row["avgUtilization"] == 2
    assert row["hasFutureAssignment"] is True
    assert row["skills"] == [{"name": "QA", "proficiency": None}]

    kpis = overview["kpis"]
    assert kpis["totalResources"] == 1
    assert kpis["resourcesWithAssignment"] == 1
    assert kpis["resourcesWithoutAssignment"] == 0
    assert kpis["avgUtilization"] == {"current": 24, "future": 0}

    comparison = overview["charts"]["monthlyComparison"][2]
    assert comparison == {"month": 3, "committedHours": 40, "availableHours": 128}
    skills = overview["charts"]["skillsAvailability"]
    assert [s["skill"] for s in skills] == ["QA"]
    assert skills[0]["currentMonth"] == 128


def test_overview_for_empty_team(session):
    overview = build_capacity_overview(session, "NOBODY", today=date(2026, 3, 15))

    assert overview["resources"] == []
    assert overview["kpis"]["totalResources"] == 0
    assert overview["kpis"]["avgUtilization"] == {"current": 0, "future": 0}
    assert overview["charts"]["skillsAvailability"] == []
    assert len(overview["charts"]["monthlyComparison"]) == 12


def test_overview_honours_configured_working_days(session):
    ana = make_resource(session)
    make_assignment(session, make_project(session), ana, month=3, year=2026, hours=40)

    overview = build_capacity_overview(session, "SAP", today=date(2026, 3, 15), working_days=16)

    march = overview["resources"][0]["monthlyData"][2]
    # 160h over 16 days is 10h/day across March's 22 weekdays.
    assert march["totalHours"] == 220
    assert march["availableHours"] == 180
