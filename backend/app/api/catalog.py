from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlmodel import Session, col, select

from app.api.deps import SESSION_DEP
from app.core.responses import success_response
from app.models.catalog import Domain, Status
from app.services.resources import list_skills

router = APIRouter(tags=["catalog"])


@router.get("/statuses")
def list_statuses(session: Session = SESSION_DEP) -> JSONResponse:
    return success_response(session.exec(select(Status).order_by(col(Status.order).asc())).all())


@router.get("/domains")
def list_domains(session: Session = SESSION_DEP) -> JSONResponse:
    return success_response(session.exec(select(Domain).order_by(col(Domain.name).asc())).all())


@router.get("/skills")
def get_skills(team: str | None = Query(default=None), session: Session = SESSION_DEP) -> JSONResponse:
    skills = list_skills(session, team)
    return success_response({"skills": skills, "count": len(skills)})
