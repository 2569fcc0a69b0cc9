from __future__ import annotations

from fastapi import Depends, Header, Request

from app.core.config import Settings
from app.core.responses import TEAM_HEADER
from app.db.session import get_session
from app.services.capacity import AbsenceProvider

SESSION_DEP = Depends(get_session)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_absences(request: Request) -> AbsenceProvider:
    return request.app.state.absences


def get_user_team(x_user_team: str | None = Header(default=None, alias=TEAM_HEADER)) -> str | None:
    """Team scope sent by the dashboard; blank counts as absent."""
    if x_user_team is None:
        return None
    return x_user_team.strip() or None


SETTINGS_DEP = Depends(get_settings)
ABSENCES_DEP = Depends(get_absences)
USER_TEAM_DEP = Depends(get_user_team)
