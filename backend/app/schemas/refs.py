"""Lightweight projections embedded in other entities' responses."""

from __future__ import annotations

from uuid import UUID

from app.schemas.common import CamelModel


class ProjectRef(CamelModel):
    id: UUID
    code: str
    title: str


class ProjectBrief(ProjectRef):
    type: str | None = None
    priority: str | None = None
    status: int | None = None


class ResourceRef(CamelModel):
    id: UUID
    code: str
    name: str


class ResourceContact(ResourceRef):
    email: str | None = None


class ResourceBrief(ResourceContact):
    active: bool
