from __future__ import annotations

from sqlmodel import Field, SQLModel


class Status(SQLModel, table=True):
    __tablename__ = "statuses"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    order: int = Field(default=0)


class Domain(SQLModel, table=True):
    __tablename__ = "domains"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    description: str | None = None
