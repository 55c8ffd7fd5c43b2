# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from offboarding.models.base import TimestampMixin, UUIDBase
from offboarding.models.enums import AssetRecoveryStatus


def _now_utc() -> datetime:
    return datetime.now(UTC)


def _exit_request_fk() -> sa.Column:
    return sa.Column(sa.Uuid, sa.ForeignKey("exit_request.id", ondelete="CASCADE"), nullable=False, index=True)


class AssetRecovery(UUIDBase, TimestampMixin, table=True):
    """An asset issued to the employee and where its recovery stands. One row per asset."""

    __tablename__ = "exit_asset_recovery"
    __table_args__ = (sa.UniqueConstraint("exit_request_id", "asset_id", name="uq_asset_recovery_request_asset"),)

    exit_request_id: uuid.UUID = Field(sa_column=_exit_request_fk())
    asset_id: str = Field(max_length=100)
    asset_name: str | None = Field(default=None, max_length=255)
    cost: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    depreciation: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    status: str = Field(default=AssetRecoveryStatus.PENDING, max_length=50)
    remarks: str | None = None
    recovered_by: uuid.UUID | None = None
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )


class RecoverableDue(UUIDBase, TimestampMixin, table=True):
    """An amount the employee owes the company, keyed by due type."""

    __tablename__ = "exit_recoverable_due"
    __table_args__ = (sa.UniqueConstraint("exit_request_id", "due_type", name="uq_recoverable_due_request_type"),)

    exit_request_id: uuid.UUID = Field(sa_column=_exit_request_fk())
    due_type: str = Field(max_length=50)
    description: str | None = Field(default=None, max_length=255)
    amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    notes: str | None = None
    recorded_by: uuid.UUID
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
