from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse
from sqlmodel import Session

from app.api.deps import SESSION_DEP, SETTINGS_DEP, USER_TEAM_DEP
from app.core.config import Settings
from app.core.responses import created_response, no_content_response, success_response
from app.schemas.resources import ResourceCreate, ResourceUpdate
from app.services import resources as resource_service
from app.services.resources import ResourceFilters

router = APIRouter(prefix="/resources", tags=["resources"])


@router.get("")
def list_resources(
    active: bool | None = Query(default=None),
    skill: str | None = Query(default=None),
    team: str | None = Query(default=None),
    user_team: str | None = USER_TEAM_DEP,
    session: Session = SESSION_DEP,
) -> JSONResponse:
    filters = ResourceFilters(active=active, skill=skill, team=user_team or team)
    items = resource_service.list_resources(session, filters)
    return success_response({"resources": items, "count": len(items)})


@router.get("/{resource_id}")
def get_resource(resource_id: UUID, session: Session = SESSION_DEP) -> JSONResponse:
    return success_response(resource_service.get_resource(session, resource_id))


@router.post("")
def create_resource(
    payload: ResourceCreate,
    session: Session = SESSION_DEP,
    settings: Settings = SETTINGS_DEP,
) -> JSONResponse:
    resource = resource_service.create_resource(
        session,
        payload,
        default_max_hours=settings.default_max_resource_hours,
        default_capacity=settings.default_resource_capacity,
    )
    return created_response(resource)


@router.put("/{resource_id}")
def update_resource(
    resource_id: UUID,
    payload: ResourceUpdate,
    session: Session = SESSION_DEP,
    settings: Settings = SETTINGS_DEP,
) -> JSONResponse:
    resource = resource_service.update_resource(
        session,
        resource_id,
        payload,
        default_max_hours=settings.default_max_resource_hours,
    )
    return success_response(resource)


@router.delete("/{resource_id}", status_code=204)
def delete_resource(resource_id: UUID, session: Session = SESSION_DEP) -> Response:
    resource_service.delete_resource(session, resource_id)
    return no_content_response()
