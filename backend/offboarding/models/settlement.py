# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from offboarding.models.base import UUIDBase


def _now_utc() -> datetime:
    return datetime.now(UTC)


def _money() -> Any:
    return Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)


class SettlementCalculation(UUIDBase, table=True):
    """Immutable result of one settlement calculation. Recalculating inserts a new row."""

    __tablename__ = "settlement_calculation"
    __table_args__ = (sa.UniqueConstraint("exit_request_id", "sequence", name="uq_settlement_request_sequence"),)

    exit_request_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("exit_request.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    calculated_by: uuid.UUID
    # 1, 2, 3... per exit request; the highest is the latest calculation.
    sequence: int = Field(default=1, ge=1)

    # Earnings
    salary_payable: Decimal = _money()
    leave_encashment: Decimal = _money()
    bonus: Decimal = _money()
    incentives: Decimal = _money()
    reimbursements: Decimal = _money()
    total_payable: Decimal = _money()

    # Deductions
    notice_recovery: Decimal = _money()
    asset_recovery: Decimal = _money()
    loans: Decimal = _money()
    advances: Decimal = _money()
    pending_recoveries: Decimal = _money()
    statutory_deductions: Decimal = _money()
    total_recoverable: Decimal = _money()

    net_settlement: Decimal = _money()
    settlement_status: str = Field(max_length=50)
    details_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    inputs_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    calculated_at: datetime = Field(
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
