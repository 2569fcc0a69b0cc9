# ruff: noqa

from datetime import date
from uuid import uuid4

import pytest
from sqlmodel import select

from app.core.errors import NotFoundError, ValidationError
from app.models import Assignment
from app.schemas.assignments import AssignmentUpdate
from app.services.assignments import (
    AssignmentFilters,
    delete_assignment,
    delete_project_assignments,
    get_assignment,
    list_assignments,
    update_assignment,
)
from factories import make_assignment, make_project, make_resource


def test_update_applies_only_supplied_fields(session):
    project = make_project(session)
    resource = make_resource(session)
    assignment = make_assignment(session, project, resource, month=3, year=2026, hours=10, description="old")

    detail = update_assignment(session, assignment.id, AssignmentUpdate(hours=12, description=None))

    assert detail.hours == 12
    assert detail.description is None
    assert detail.title == "Work"
    assert (detail.month, detail.year) == (3, 2026)


def test_update_ignores_blank_title(session):
    project = make_project(session)
    assignment = make_assignment(session, project, None, month=3, year=2026)

    detail = update_assignment(session, assignment.id, AssignmentUpdate(title="", hours=2))

    assert detail.title == "Work"
    assert detail.hours == 2


def test_update_with_nothing_to_change_is_rejected(session):
    project = make_project(session)
    assignment = make_assignment(session, project, None, month=3, year=2026)

    with pytest.raises(ValidationError) as excinfo:
        update_assignment(session, assignment.id, AssignmentUpdate())
    assert excinfo.value.message == "No fields to update"


@pytest.mark.parametrize(
    ("patch", "message"),
    [
        ({"hours": 0}, "hours must be greater than 0"),
        ({"month": 0}, "month must be between 1 and 12"),
    ],
)
def test_update_validates_values(session, patch, message):
    project = make_project(session)
    assignment = make_assignment(session, project, None, month=3, year=2026)

    with pytest.raises(ValidationError) as excinfo:
        update_assignment(session, assignment.id, AssignmentUpdate(**patch))
    assert excinfo.value.message == message


def test_update_to_unknown_resource_is_not_found(session):
    project = make_project(session)
    assignment = make_assignment(session, project, None, month=3, year=2026)

    with pytest.raises(NotFoundError):
        update_assignment(session, assignment.id, AssignmentUpdate(resource_id=uuid4()))


def test_update_missing_assignment_is_not_found(session):
    with pytest.raises(NotFoundError) as excinfo:
        update_assignment(session, uuid4(), AssignmentUpdate(hours=1))
    assert excinfo.value.entity == "Assignment"


def test_get_assignment_embeds_full_project_and_resource(session):
    project = make_project(session, description="SAP rollout")
    resource = make_resource(session)
    assignment = make_assignment(session, project, resource, date=date(2026, 3, 5))

    full = get_assignment(session, assignment.id)

    assert full.project.description == "SAP rollout"
    assert full.resource.email is None
    assert full.resource.team == "SAP"


def test_list_filters_and_orders_newest_month_first(session):
    project = make_project(session)
    other = make_project(session, code="PRJ-2")
    sap = make_resource(session)
    bi = make_resource(session, code="BI0001", team="BI")
    make_assignment(session, project, sap, month=1, year=2026, skill_name="QA")
    make_assignment(session, project, sap, month=5, year=2026)
    make_assignment(session, other, bi, month=2, year=2027)

    everything = list_assignments(session, AssignmentFilters())
    assert [(a.year, a.month) for a in everything] == [(2027, 2), (2026, 5), (2026, 1)]

    by_project = list_assignments(session, AssignmentFilters(project_id=project.id))
    assert len(by_project) == 2
    assert {a.project.code for a in by_project} == {"PRJ-1"}

    assert len(list_assignments(session, AssignmentFilters(skill_name="QA"))) == 1
    assert len(list_assignments(session, AssignmentFilters(team="BI"))) == 1
    assert len(list_assignments(session, AssignmentFilters(month=5, year=2026))) == 1


def test_delete_assignment(session):
    project = make_project(session)
    assignment = make_assignment(session, project, None, month=3, year=2026)

    delete_assignment(session, assignment.id)

    assert session.get(Assignment, assignment.id) is None
    with pytest.raises(NotFoundError):
        delete_assignment(session, assignment.id)


def test_delete_project_assignments_returns_count(session):
    project = make_project(session)
    other = make_project(session, code="PRJ-2")
    for month in (1, 2, 3):
        make_assignment(session, project, None, month=month, year=2026)
    make_assignment(session, other, None, month=1, year=2026)

    assert delete_project_assignments(session, project.id) == 3
    assert delete_project_assignments(session, project.id) == 0

    remaining = session.exec(select(Assignment)).all()
    assert [a.project_id for a in remaining] == [other.id]
