# ruff: noqa

from datetime import date
from uuid import uuid4

import pytest
from sqlmodel import select

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models import Assignment, ProjectSkillBreakdown
from app.schemas.projects import ProjectCreate, ProjectUpdate
from app.services.projects import (
    ProjectFilters,
    create_project,
    delete_project,
    get_project,
    list_projects,
    update_project,
)
from factories import make_assignment, make_project, make_resource


def _breakdown(session, project, hours, *, skill="QA", month=3, year=2026):
    row = ProjectSkillBreakdown(project_id=project.id, skill_name=skill, month=month, year=year, hours=hours)
    session.add(row)
    session.commit()
    return row


def test_create_project_requires_code_title_and_team(session):
    with pytest.raises(ValidationError) as excinfo:
        create_project(session, ProjectCreate(code=" "))
    assert [e["field"] for e in excinfo.value.errors] == ["code", "title", "team"]


def test_create_project_rejects_end_before_start(session):
    payload = ProjectCreate(
        code="P1", title="T", team="SAP", start_date=date(2026, 5, 1), end_date=date(2026, 4, 1)
    )
    with pytest.raises(ValidationError) as excinfo:
        create_project(session, payload)
    assert excinfo.value.errors == [{"field": "endDate", "message": "endDate must be on or after startDate"}]


def test_project_code_is_unique_per_team(session):
    create_project(session, ProjectCreate(code="P1", title="T", team="SAP", type=""))

    with pytest.raises(ConflictError) as excinfo:
        create_project(session, ProjectCreate(code="P1", title="Other", team="SAP"))
    assert excinfo.value.message == "Project with code 'P1' already exists for team 'SAP'"

    other_team = create_project(session, ProjectCreate(code="P1", title="T", team="BI"))
    assert other_team.team == "BI"
    assert other_team.type is None


def test_update_project_checks_code_collision(session):
    make_project(session, code="P1")
    second = make_project(session, code="P2")

    with pytest.raises(ConflictError):
        update_project(session, second.id, ProjectUpdate(code="P1"))

    updated = update_project(session, second.id, ProjectUpdate(title="Renamed", description=None))
    assert updated.title == "Renamed"
    assert updated.code == "P2"


def test_update_project_without_changes_is_rejected(session):
    project = make_project(session)

    with pytest.raises(ValidationError) as excinfo:
        update_project(session, project.id, ProjectUpdate(title=""))
    assert excinfo.value.message == "Validation failed"

    with pytest.raises(ValidationError) as excinfo:
        update_project(session, project.id, ProjectUpdate())
    assert excinfo.value.message == "No fields to update"


def test_get_project_metrics(session):
    project = make_project(session)
    ana = make_resource(session)
    bob = make_resource(session, code="BO0001", name="Bob", email="bob@example.com")
    _breakdown(session, project, 30)
    _breakdown(session, project, 10, skill="Diseño")
    make_assignment(session, project, ana, month=3, year=2026, hours=10)
    make_assignment(session, project, bob, month=3, year=2026, hours=5)
    make_assignment(session, project, None, month=3, year=2026, hours=0.5)

    detail = get_project(session, project.id)

    assert detail.metrics.total_committed_hours == 40
    assert detail.metrics.total_assigned_hours == 15.5
    assert detail.metrics.assigned_resources_count == 2
    assert detail.metrics.completion_percentage == 39
    emails = {a.resource.email for a in detail.assignments if a.resource}
    assert emails == {None, "bob@example.com"}


def test_get_project_without_commitment_reports_zero_completion(session):
    project = make_project(session)

    assert get_project(session, project.id).metrics.completion_percentage == 0
    with pytest.raises(NotFoundError):
        get_project(session, uuid4())


def test_list_projects_filters_by_team_and_status(session):
    make_project(session, code="P1", status=1)
    make_project(session, code="P2", status=2)
    make_project(session, code="P3", team="BI", status=1)

    assert {p.code for p in list_projects(session, ProjectFilters(team="SAP"))} == {"P1", "P2"}
    assert {p.code for p in list_projects(session, ProjectFilters(status=1))} == {"P1", "P3"}


def test_delete_project_removes_assignments_and_breakdowns(session):
    project = make_project(session)
    keep = make_project(session, code="P-KEEP")
    _breakdown(session, project, 30)
    make_assignment(session, project, None, month=3, year=2026)
    make_assignment(session, keep, None, month=3, year=2026)

    delete_project(session, project.id)

    assert session.exec(select(ProjectSkillBreakdown)).all() == []
    assert [a.project_id for a in session.exec(select(Assignment)).all()] == [keep.id]
    with pytest.raises(NotFoundError):
        delete_project(session, project.id)
