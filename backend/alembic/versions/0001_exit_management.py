"""Exit requests, clearance items, asset recoveries, dues, settlement calculations and activity log.

Revision ID: 0001
Revises:
Create Date: 2025-06-01
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_OPEN_CLAUSE = "status NOT IN ('completed', 'cancelled')"


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision=12, scale=2), nullable=False)


def upgrade() -> None:
    op.create_table(
        "exit_request",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("manager_id", sa.Uuid(), nullable=True),
        sa.Column("resignation_date", sa.Date(), nullable=False),
        sa.Column("last_working_day", sa.Date(), nullable=False),
        sa.Column("exit_type", sa.String(length=50), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("initiated_by", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=50), server_default="initiated", nullable=False),
        sa.Column("manager_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("hr_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("clearance_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("settlement_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_exit_request_company_id", "exit_request", ["company_id"])
    op.create_index("ix_exit_request_company_status", "exit_request", ["company_id", "status"])
    op.create_index(
        "uq_exit_request_one_active",
        "exit_request",
        ["company_id", "employee_id"],
        unique=True,
        postgresql_where=sa.text(_OPEN_CLAUSE),
        sqlite_where=sa.text(_OPEN_CLAUSE),
    )

    op.create_table(
        "clearance_item",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "exit_request_id",
            sa.Uuid(),
            sa.ForeignKey("exit_request.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("department", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("approver_id", sa.Uuid(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("exit_request_id", "department", name="uq_clearance_request_department"),
    )
    op.create_index("ix_clearance_item_exit_request_id", "clearance_item", ["exit_request_id"])

    op.create_table(
        "exit_asset_recovery",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "exit_request_id",
            sa.Uuid(),
            sa.ForeignKey("exit_request.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("asset_id", sa.String(length=100), nullable=False),
        sa.Column("asset_name", sa.String(length=255), nullable=True),
        _money("cost"),
        _money("depreciation"),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("remarks", sa.String(), nullable=True),
        sa.Column("recovered_by", sa.Uuid(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("exit_request_id", "asset_id", name="uq_asset_recovery_request_asset"),
    )
    op.create_index("ix_exit_asset_recovery_exit_request_id", "exit_asset_recovery", ["exit_request_id"])

    op.create_table(
        "exit_recoverable_due",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "exit_request_id",
            sa.Uuid(),
            sa.ForeignKey("exit_request.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("due_type", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        _money("amount"),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("recorded_by", sa.Uuid(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("exit_request_id", "due_type", name="uq_recoverable_due_request_type"),
    )
    op.create_index("ix_exit_recoverable_due_exit_request_id", "exit_recoverable_due", ["exit_request_id"])

    op.create_table(
        "settlement_calculation",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "exit_request_id",
            sa.Uuid(),
            sa.ForeignKey("exit_request.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("calculated_by", sa.Uuid(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        _money("salary_payable"),
        _money("leave_encashment"),
        _money("bonus"),
        _money("incentives"),
        _money("reimbursements"),
        _money("total_payable"),
        _money("notice_recovery"),
        _money("asset_recovery"),
        _money("loans"),
        _money("advances"),
        _money("pending_recoveries"),
        _money("statutory_deductions"),
        _money("total_recoverable"),
        _money("net_settlement"),
        sa.Column("settlement_status", sa.String(length=50), nullable=False),
        sa.Column("details_json", sa.JSON(), nullable=True),
        sa.Column("inputs_json", sa.JSON(), nullable=True),
        sa.Column("calculated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("exit_request_id", "sequence", name="uq_settlement_request_sequence"),
    )
    op.create_index("ix_settlement_calculation_exit_request_id", "settlement_calculation", ["exit_request_id"])

    op.create_table(
        "exit_activity_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("exit_request_id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("details_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_exit_activity_log_company_id", "exit_activity_log", ["company_id"])
    op.create_index("ix_activity_request_created", "exit_activity_log", ["exit_request_id", "created_at"])


def downgrade() -> None:
    op.drop_table("exit_activity_log")
    op.drop_table("settlement_calculation")
    op.drop_table("exit_recoverable_due")
    op.drop_table("exit_asset_recovery")
    op.drop_table("clearance_item")
    op.drop_index("uq_exit_request_one_active", table_name="exit_request")
    op.drop_table("exit_request")
