"""Typed lookup over the ``app_config`` key/value table."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.models.app_config import AppConfig

logger = get_logger(__name__)

MAX_RESOURCE_HOURS_KEY = "max_resource_hours"
DEFAULT_MAX_RESOURCE_HOURS = 180


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    key: str
    value: Any
    type: str
    team: str | None
    description: str | None

    def as_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "type": self.type,
            "team": self.team,
            "description": self.description,
        }


class ConfigNotFoundError(NotFoundError):
    def __init__(self, key: str, team: str | None = None):
        message = f"Configuration '{key}' not found"
        if team:
            message += f" for team '{team}'"
        super().__init__("Configuration", key, message=message)


def parse_config_value(raw: str, config_type: str | None) -> Any:
    """Interpret a stored string according to its ``config_type`` tag.

    A malformed value is logged and returned as the raw string.
    """
    try:
        if config_type == "json":
            return json.loads(raw)
        if config_type == "number":
            return float(raw)
    except (TypeError, ValueError):
        logger.warning("config.parse_failed type=%s value=%r", config_type, raw)
        return raw
    if config_type == "boolean":
        return raw == "true"
    return raw


def _active_entries(key: str):
    return select(AppConfig).where(
        col(AppConfig.config_key) == key,
        col(AppConfig.is_active).is_(True),
    )


def _find_entry(session: Session, key: str, team: str | None) -> AppConfig | None:
    if team is None:
        stmt = _active_entries(key).where(col(AppConfig.team).is_(None))
        return session.exec(stmt).first()

    exact = session.exec(_active_entries(key).where(col(AppConfig.team) == team)).first()
    if exact is not None:
        return exact

    wanted = team.lower()
    for entry in session.exec(_active_entries(key)).all():
        if entry.team and entry.team.lower() == wanted:
            return entry
    return None


def resolve(session: Session, key: str, team: str | None = None) -> ResolvedConfig:
    """Resolve ``key`` for ``team`` (or the global entry when ``team`` is None).

    Raises ``ConfigNotFoundError`` when no active entry matches.
    """
    entry = _find_entry(session, key, team or None)
    if entry is None:
        raise ConfigNotFoundError(key, team or None)
    return ResolvedConfig(
        key=entry.config_key,
        value=parse_config_value(entry.config_value, entry.config_type),
        type=entry.config_type,
        team=entry.team,
        description=entry.description,
    )


def get_max_resource_hours(session: Session, default: int = DEFAULT_MAX_RESOURCE_HOURS) -> int:
    """Global ``max_resource_hours`` as a positive int, ``default`` on any miss."""
    try:
        resolved = resolve(session, MAX_RESOURCE_HOURS_KEY)
    except ConfigNotFoundError:
        logger.info("config.max_resource_hours.default value=%s", default)
        return default
    except SQLAlchemyError:
        session.rollback()
        logger.warning("config.max_resource_hours.lookup_failed default=%s", default, exc_info=True)
        return default

    # Stored untyped in most deployments, so coerce whatever came back.
    try:
        max_hours = int(float(resolved.value))
    except (TypeError, ValueError, OverflowError):
        logger.warning("config.max_resource_hours.invalid value=%r default=%s", resolved.value, default)
        return default
    if max_hours <= 0:
        logger.warning("config.max_resource_hours.invalid value=%r default=%s", resolved.value, default)
        return default
    return max_hours
