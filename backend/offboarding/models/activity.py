# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def _now_utc() -> datetime:
    return datetime.now(UTC)


class ExitActivityLog(SQLModel, table=True):
    """Append-only record of everything that happened to an exit request.

    ``exit_request_id`` is not a foreign key: entries outlive the
    request they describe. The integer primary key gives the insertion order
    used to break timestamp ties.
    """

    __tablename__ = "exit_activity_log"
    __table_args__ = (sa.Index("ix_activity_request_created", "exit_request_id", "created_at"),)

    id: int | None = Field(default=None, primary_key=True)
    company_id: uuid.UUID = Field(index=True)
    exit_request_id: uuid.UUID
    actor_id: uuid.UUID
    action: str = Field(max_length=50)
    details_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    created_at: datetime = Field(
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
