from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from sqlmodel import Session, SQLModel

from app.core.errors import NotFoundError
from app.core.time import utcnow

ModelT = TypeVar("ModelT", bound=SQLModel)


def get_or_404(session: Session, model: type[ModelT], obj_id: object, *, entity: str) -> ModelT:
    obj = session.get(model, obj_id)
    if obj is None:
        raise NotFoundError(entity, obj_id)
    return obj


def apply_patch(obj: SQLModel, changes: Mapping[str, Any], *, allowed: Iterable[str]) -> dict[str, Any]:
    """Copy ``changes`` onto ``obj`` for whitelisted columns only.

    Returns the subset that was applied. Unknown keys are ignored, so a patch
    can never reach a column outside ``allowed``.
    """
    allowed_set = frozenset(allowed)
    applied = {k: v for k, v in changes.items() if k in allowed_set}
    for key, value in applied.items():
        setattr(obj, key, value)
    if applied and hasattr(obj, "updated_at"):
        obj.updated_at = utcnow()
    return applied


def save(session: Session, obj: ModelT) -> ModelT:
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj
