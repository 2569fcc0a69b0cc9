from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse
from sqlmodel import Session

from app.api.deps import SESSION_DEP, USER_TEAM_DEP
from app.core.logging import get_logger
from app.core.responses import created_response, no_content_response, success_response
from app.schemas.projects import ProjectCreate, ProjectUpdate
from app.services import projects as project_service
from app.services.projects import ProjectFilters

router = APIRouter(prefix="/projects", tags=["projects"])
logger = get_logger(__name__)


@router.get("")
def list_projects(
    type: str | None = Query(default=None),
    status: int | None = Query(default=None),
    domain: int | None = Query(default=None),
    priority: str | None = Query(default=None),
    user_team: str | None = USER_TEAM_DEP,
    session: Session = SESSION_DEP,
) -> JSONResponse:
    logger.debug("projects.list team=%s", user_team)
    filters = ProjectFilters(type=type, status=status, domain=domain, priority=priority, team=user_team)
    items = project_service.list_projects(session, filters)
    return success_response({"projects": items, "count": len(items)})


@router.get("/{project_id}")
def get_project(project_id: UUID, session: Session = SESSION_DEP) -> JSONResponse:
    return success_response(project_service.get_project(session, project_id))


@router.post("")
def create_project(payload: ProjectCreate, session: Session = SESSION_DEP) -> JSONResponse:
    return created_response(project_service.create_project(session, payload))


@router.put("/{project_id}")
def update_project(project_id: UUID, payload: ProjectUpdate, session: Session = SESSION_DEP) -> JSONResponse:
    return success_response(project_service.update_project(session, project_id, payload))


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: UUID, session: Session = SESSION_DEP) -> Response:
    project_service.delete_project(session, project_id)
    return no_content_response()
