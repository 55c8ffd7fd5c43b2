"""Tests for the exit activity log and its detail payloads."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from offboarding.models.activity import ExitActivityLog
from offboarding.models.enums import ActivityAction, ExitStatus, SettlementStatus
from offboarding.schemas.activity import (
    ActivityDetails,
    CancellationDetails,
    ClearanceDetails,
    GenericDetails,
    InitiatedDetails,
    SettlementCalculatedDetails,
    TransitionDetails,
)
from offboarding.services.activity import append_activity, build_activity_response, list_activity

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

COMPANY_ID = uuid.uuid4()
ACTOR_ID = uuid.uuid4()

_adapter: TypeAdapter[ActivityDetails] = TypeAdapter(ActivityDetails)


# ---------------------------------------------------------------------------
# Detail payloads
# ---------------------------------------------------------------------------


def test_details_decode_to_their_shape() -> None:
    clearance = _adapter.validate_python({"kind": "clearance", "department": "it", "status": "approved"})
    assert isinstance(clearance, ClearanceDetails)
    cancellation = _adapter.validate_python({"kind": "cancellation", "from_status": "initiated"})
    assert isinstance(cancellation, CancellationDetails)
    transition = _adapter.validate_python(
        {"kind": "transition", "from_status": "initiated", "to_status": "manager_approved"}
    )
    assert isinstance(transition, TransitionDetails)
    assert transition.to_status == ExitStatus.MANAGER_APPROVED


def test_unknown_kind_falls_back_to_generic() -> None:
    details = _adapter.validate_python({"kind": "legacy_import", "data": {"source": "csv"}})
    assert isinstance(details, GenericDetails)
    assert details.data == {"source": "csv"}


def test_unknown_kind_keeps_kind_and_keys() -> None:
    details = _adapter.validate_python({"kind": "payroll_sync", "batch": 12, "source": "sap"})
    assert isinstance(details, GenericDetails)
    assert details.kind == "payroll_sync"
    assert details.data == {"batch": 12, "source": "sap"}
    assert details.model_dump(mode="json") == {"kind": "payroll_sync", "data": {"batch": 12, "source": "sap"}}


def test_missing_kind_falls_back_to_generic() -> None:
    details = _adapter.validate_python({})
    assert isinstance(details, GenericDetails)


def test_settlement_details_round_trip_through_json() -> None:
    original = SettlementCalculatedDetails(
        calculation_id=uuid.uuid4(),
        total_payable=Decimal("1000.10"),
        total_recoverable=Decimal("200.05"),
        net_settlement=Decimal("800.05"),
        settlement_status=SettlementStatus.COMPANY_PAYS_EMPLOYEE,
    )
    stored = original.model_dump(mode="json")
    assert stored["net_settlement"] == "800.05"
    assert _adapter.validate_python(stored) == original


def test_build_response_decodes_stored_details() -> None:
    entry = ExitActivityLog(
        id=7,
        company_id=COMPANY_ID,
        exit_request_id=uuid.uuid4(),
        actor_id=ACTOR_ID,
        action="initiated",
        details_json={
            "kind": "initiated",
            "exit_type": "resignation",
            "resignation_date": "2025-01-01",
            "last_working_day": "2025-01-31",
        },
    )
    response = build_activity_response(entry)
    assert response.id == 7
    assert response.action == ActivityAction.INITIATED
    assert isinstance(response.details, InitiatedDetails)
    assert response.details.last_working_day == date(2025, 1, 31)


def test_build_response_without_details() -> None:
    entry = ExitActivityLog(
        id=1,
        company_id=COMPANY_ID,
        exit_request_id=uuid.uuid4(),
        actor_id=ACTOR_ID,
        action="completed",
    )
    assert build_activity_response(entry).details is None


# ---------------------------------------------------------------------------
# Append / list
# ---------------------------------------------------------------------------


async def test_list_returns_entries_oldest_first(db_session: AsyncSession) -> None:
    exit_request_id = uuid.uuid4()
    for action in (ActivityAction.INITIATED, ActivityAction.MANAGER_APPROVED, ActivityAction.CANCELLED):
        await append_activity(
            db_session,
            company_id=COMPANY_ID,
            exit_request_id=exit_request_id,
            action=action,
            actor_id=ACTOR_ID,
        )
    await db_session.commit()

    result = await list_activity(db_session, COMPANY_ID, exit_request_id)

    assert result.total == 3
    assert [e.action for e in result.items] == ["initiated", "manager_approved", "cancelled"]
    ids = [e.id for e in result.items]
    assert ids == sorted(ids)


async def test_list_is_scoped_to_request_and_company(db_session: AsyncSession) -> None:
    mine, other = uuid.uuid4(), uuid.uuid4()
    await append_activity(
        db_session,
        company_id=COMPANY_ID,
        exit_request_id=mine,
        action=ActivityAction.INITIATED,
        actor_id=ACTOR_ID,
    )
    await append_activity(
        db_session,
        company_id=COMPANY_ID,
        exit_request_id=other,
        action=ActivityAction.INITIATED,
        actor_id=ACTOR_ID,
    )
    await append_activity(
        db_session,
        company_id=uuid.uuid4(),
        exit_request_id=mine,
        action=ActivityAction.DELETED,
        actor_id=ACTOR_ID,
    )
    await db_session.commit()

    result = await list_activity(db_session, COMPANY_ID, mine)
    assert result.total == 1
    assert result.items[0].action == ActivityAction.INITIATED


async def test_details_are_returned_structured(db_session: AsyncSession) -> None:
    exit_request_id = uuid.uuid4()
    await append_activity(
        db_session,
        company_id=COMPANY_ID,
        exit_request_id=exit_request_id,
        action=ActivityAction.CLEARANCE_UPDATED,
        actor_id=ACTOR_ID,
        details=ClearanceDetails(department="finance", status="approved", notes="No dues"),
    )
    await db_session.commit()

    result = await list_activity(db_session, COMPANY_ID, exit_request_id)
    details = result.items[0].details
    assert isinstance(details, ClearanceDetails)
    assert details.department == "finance"
    assert details.notes == "No dues"


async def test_stored_entry_of_unknown_kind_is_listed(db_session: AsyncSession) -> None:
    exit_request_id = uuid.uuid4()
    db_session.add(
        ExitActivityLog(
            company_id=COMPANY_ID,
            exit_request_id=exit_request_id,
            actor_id=ACTOR_ID,
            action=ActivityAction.COMPLETED.value,
            details_json={"kind": "handover", "owner": "ops", "items": 3},
        )
    )
    await db_session.commit()

    result = await list_activity(db_session, COMPANY_ID, exit_request_id)
    details = result.items[0].details
    assert isinstance(details, GenericDetails)
    assert details.kind == "handover"
    assert details.data == {"owner": "ops", "items": 3}
