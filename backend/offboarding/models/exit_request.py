# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from offboarding.models.base import TimestampMixin, UUIDBase
from offboarding.models.enums import ExitStatus, ExitType

# An employee may have any number of closed exits but only one open one.
_OPEN_CLAUSE = "status NOT IN ('completed', 'cancelled')"


class ExitRequest(UUIDBase, TimestampMixin, table=True):
    """One employee's departure, driven through the exit lifecycle."""

    __tablename__ = "exit_request"
    __table_args__ = (
        sa.Index("ix_exit_request_company_status", "company_id", "status"),
        sa.Index(
            "uq_exit_request_one_active",
            "company_id",
            "employee_id",
            unique=True,
            postgresql_where=sa.text(_OPEN_CLAUSE),
            sqlite_where=sa.text(_OPEN_CLAUSE),
        ),
    )

    company_id: uuid.UUID = Field(index=True)
    employee_id: uuid.UUID
    department: str | None = Field(default=None, max_length=255)
    manager_id: uuid.UUID | None = None
    resignation_date: date
    last_working_day: date
    exit_type: str = Field(default=ExitType.RESIGNATION, max_length=50)
    reason: str | None = None
    initiated_by: uuid.UUID
    status: str = Field(
        default=ExitStatus.INITIATED, max_length=50, sa_column_kwargs={"server_default": "initiated"}
    )
    manager_approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    hr_approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    clearance_completed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    settlement_completed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    completed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    cancelled_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
