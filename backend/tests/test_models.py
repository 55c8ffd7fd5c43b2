from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.exc import IntegrityError

from offboarding.models import (
    ClearanceItem,
    ExitActivityLog,
    ExitRequest,
    SettlementCalculation,
    SQLModel,
)
from offboarding.models.enums import ClearanceStatus, ExitStatus, ExitType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

EXPECTED_TABLES = {
    "clearance_item",
    "exit_activity_log",
    "exit_asset_recovery",
    "exit_recoverable_due",
    "exit_request",
    "settlement_calculation",
}


def _exit_request(
    employee_id: uuid.UUID,
    company_id: uuid.UUID,
    status: ExitStatus = ExitStatus.INITIATED,
) -> ExitRequest:
    return ExitRequest(
        company_id=company_id,
        employee_id=employee_id,
        resignation_date=date(2025, 1, 1),
        last_working_day=date(2025, 1, 31),
        initiated_by=employee_id,
        status=status.value,
    )


def test_all_tables_registered() -> None:
    table_names = set(SQLModel.metadata.tables.keys())
    assert EXPECTED_TABLES.issubset(table_names)


def test_exit_request_defaults() -> None:
    request = ExitRequest(
        company_id=uuid.uuid4(),
        employee_id=uuid.uuid4(),
        resignation_date=date(2025, 1, 1),
        last_working_day=date(2025, 1, 31),
        initiated_by=uuid.uuid4(),
    )
    assert request.status == ExitStatus.INITIATED
    assert request.exit_type == ExitType.RESIGNATION
    assert request.manager_approved_at is None
    assert request.cancelled_at is None
    assert request.id is not None


def test_clearance_item_defaults() -> None:
    item = ClearanceItem(exit_request_id=uuid.uuid4(), department="it")
    assert item.status == ClearanceStatus.PENDING
    assert item.approved_at is None


def test_settlement_calculation_money_defaults() -> None:
    calculation = SettlementCalculation(
        exit_request_id=uuid.uuid4(),
        calculated_by=uuid.uuid4(),
        settlement_status="fully_settled",
    )
    assert calculation.net_settlement == Decimal("0.00")
    assert calculation.total_payable == Decimal("0.00")


def test_money_columns_are_numeric_12_2() -> None:
    column = SettlementCalculation.__table__.c.net_settlement  # type: ignore[attr-defined]
    assert column.type.precision == 12
    assert column.type.scale == 2


def test_activity_log_has_no_foreign_key() -> None:
    table = ExitActivityLog.__table__  # type: ignore[attr-defined]
    assert not table.c.exit_request_id.foreign_keys


async def test_only_one_open_exit_per_employee(db_session: AsyncSession) -> None:
    company_id, employee_id = uuid.uuid4(), uuid.uuid4()
    db_session.add(_exit_request(employee_id, company_id))
    await db_session.commit()

    db_session.add(_exit_request(employee_id, company_id))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


async def test_closed_exits_do_not_count_as_open(db_session: AsyncSession) -> None:
    company_id, employee_id = uuid.uuid4(), uuid.uuid4()
    db_session.add(_exit_request(employee_id, company_id, ExitStatus.CANCELLED))
    db_session.add(_exit_request(employee_id, company_id, ExitStatus.COMPLETED))
    db_session.add(_exit_request(employee_id, company_id))
    await db_session.commit()


async def test_one_clearance_item_per_department(db_session: AsyncSession) -> None:
    request = _exit_request(uuid.uuid4(), uuid.uuid4())
    db_session.add(request)
    await db_session.commit()

    db_session.add(ClearanceItem(exit_request_id=request.id, department="it"))
    db_session.add(ClearanceItem(exit_request_id=request.id, department="it"))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


async def test_settlement_sequence_unique_per_request(db_session: AsyncSession) -> None:
    request = _exit_request(uuid.uuid4(), uuid.uuid4())
    db_session.add(request)
    await db_session.commit()

    for _ in range(2):
        db_session.add(
            SettlementCalculation(
                exit_request_id=request.id,
                calculated_by=request.initiated_by,
                sequence=1,
                settlement_status="fully_settled",
            )
        )
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()
