# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field

from offboarding.models.base import TimestampMixin, UUIDBase
from offboarding.models.enums import ClearanceStatus


def _now_utc() -> datetime:
    return datetime.now(UTC)


class ClearanceItem(UUIDBase, TimestampMixin, table=True):
    """A single department's sign-off for an exit request."""

    __tablename__ = "clearance_item"
    __table_args__ = (sa.UniqueConstraint("exit_request_id", "department", name="uq_clearance_request_department"),)

    exit_request_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("exit_request.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    department: str = Field(max_length=255)
    status: str = Field(default=ClearanceStatus.PENDING, max_length=50)
    approver_id: uuid.UUID | None = None
    notes: str | None = None
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
