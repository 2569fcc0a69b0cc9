from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlmodel import Session

from app.api.deps import SESSION_DEP
from app.core.errors import ValidationError
from app.core.logging import get_logger
from app.core.responses import success_response
from app.services import config_resolver

router = APIRouter(prefix="/config", tags=["config"])
logger = get_logger(__name__)


@router.get("")
def get_config(
    key: str | None = Query(default=None),
    team: str | None = Query(default=None),
    session: Session = SESSION_DEP,
) -> JSONResponse:
    if not key:
        raise ValidationError("Missing required parameter: key")
    logger.info("config.get key=%s team=%s", key, team or "null")
    resolved = config_resolver.resolve(session, key, team or None)
    return success_response(resolved.as_dict())
