from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlmodel import Session

from app.api.deps import SESSION_DEP, SETTINGS_DEP, USER_TEAM_DEP
from app.core.config import Settings
from app.core.errors import ValidationError
from app.core.responses import success_response
from app.schemas.capacity import CapacityUpsert
from app.services import capacity_planning

router = APIRouter(prefix="/capacity", tags=["capacity"])


@router.get("/overview")
def capacity_overview(
    year: int | None = Query(default=None),
    user_team: str | None = USER_TEAM_DEP,
    session: Session = SESSION_DEP,
    settings: Settings = SETTINGS_DEP,
) -> JSONResponse:
    if not user_team:
        raise ValidationError("x-user-team header is required")
    overview = capacity_planning.build_capacity_overview(
        session,
        user_team,
        year=year,
        working_days=settings.working_days_per_month,
    )
    return success_response(overview)


@router.get("")
def list_capacity(
    resource_id: UUID | None = Query(default=None, alias="resourceId"),
    month: int | None = Query(default=None),
    year: int | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    session: Session = SESSION_DEP,
) -> JSONResponse:
    if month is not None and not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if year is not None and not 2000 <= year <= 2100:
        raise ValidationError("Year must be between 2000 and 2100")
    result = capacity_planning.list_capacity(
        session,
        resource_id=resource_id,
        month=month,
        year=year,
        page=page,
        limit=limit,
    )
    return success_response(result)


@router.get("/{capacity_id}")
def get_capacity(capacity_id: UUID, session: Session = SESSION_DEP) -> JSONResponse:
    return success_response(capacity_planning.get_capacity(session, capacity_id))


@router.put("")
def upsert_capacity(payload: CapacityUpsert, session: Session = SESSION_DEP) -> JSONResponse:
    return success_response(capacity_planning.upsert_capacity(session, payload))
