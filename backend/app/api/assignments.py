from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse
from sqlmodel import Session

from app.api.deps import ABSENCES_DEP, SESSION_DEP, SETTINGS_DEP, USER_TEAM_DEP
from app.core.config import Settings
from app.core.errors import ValidationError
from app.core.responses import created_response, no_content_response, success_response
from app.schemas.assignments import AssignmentCreate, AssignmentUpdate
from app.services import assignments as assignment_service
from app.services.assignments import AssignmentFilters
from app.services.capacity import AbsenceProvider

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("")
def list_assignments(
    project_id: UUID | None = Query(default=None, alias="projectId"),
    resource_id: UUID | None = Query(default=None, alias="resourceId"),
    month: int | None = Query(default=None),
    year: int | None = Query(default=None),
    skill_name: str | None = Query(default=None, alias="skillName"),
    user_team: str | None = USER_TEAM_DEP,
    session: Session = SESSION_DEP,
) -> JSONResponse:
    filters = AssignmentFilters(
        project_id=project_id,
        resource_id=resource_id,
        month=month,
        year=year,
        skill_name=skill_name,
        team=user_team,
    )
    items = assignment_service.list_assignments(session, filters)
    return success_response({"assignments": items, "count": len(items)})


@router.get("/{assignment_id}")
def get_assignment(assignment_id: UUID, session: Session = SESSION_DEP) -> JSONResponse:
    return success_response(assignment_service.get_assignment(session, assignment_id))


@router.post("")
def create_assignment(
    payload: AssignmentCreate,
    session: Session = SESSION_DEP,
    absences: AbsenceProvider = ABSENCES_DEP,
    settings: Settings = SETTINGS_DEP,
) -> JSONResponse:
    assignment = assignment_service.create_assignment(
        session,
        payload,
        absences=absences,
        working_days=settings.working_days_per_month,
    )
    return created_response(assignment)


@router.put("/{assignment_id}")
def update_assignment(
    assignment_id: UUID,
    payload: AssignmentUpdate,
    session: Session = SESSION_DEP,
) -> JSONResponse:
    return success_response(assignment_service.update_assignment(session, assignment_id, payload))


@router.delete("/{assignment_id}", status_code=204)
def delete_assignment(assignment_id: UUID, session: Session = SESSION_DEP) -> Response:
    assignment_service.delete_assignment(session, assignment_id)
    return no_content_response()


@router.delete("")
def delete_project_assignments(
    project_id: UUID | None = Query(default=None, alias="projectId"),
    session: Session = SESSION_DEP,
) -> JSONResponse:
    if project_id is None:
        raise ValidationError("Assignment ID or projectId query parameter is required for delete")
    deleted = assignment_service.delete_project_assignments(session, project_id)
    return success_response(
        {"message": f"Deleted {deleted} assignments from project", "deletedCount": deleted}
    )
