"""Tests for settlement endpoints: stateless calculators and exit-bound calculations."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import update
from sqlmodel import col

from offboarding.models.settlement import SettlementCalculation
from offboarding.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service

if TYPE_CHECKING:
    from collections.abc import Iterator

    from httpx import AsyncClient, Response
    from sqlalchemy.ext.asyncio import AsyncSession

COMPANY_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
UNPAID_EMPLOYEE_ID = uuid.uuid4()
MANAGER_ID = uuid.uuid4()
HR_ID = uuid.uuid4()

EMPLOYEE_HEADERS = {"X-Company-Id": str(COMPANY_ID), "X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}
HR_HEADERS = {"X-Company-Id": str(COMPANY_ID), "X-User-Id": str(HR_ID), "X-Role": "hr"}
EXITS_URL = f"/companies/{COMPANY_ID}/exits"

NOTICE_SERVED = {"notice_period_required": 30, "notice_period_served": 30}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _seed_employee_service() -> Iterator[None]:
    """Seed the in-memory employee service for every test."""
    svc = InMemoryEmployeeService()
    svc.seed(
        EmployeeInfo(
            id=EMPLOYEE_ID,
            company_id=COMPANY_ID,
            first_name="Test",
            last_name="Employee",
            email="test@example.com",
            manager_id=MANAGER_ID,
            employment_type="Full-time",
            hire_date=date(2020, 1, 1),
            monthly_ctc=Decimal("60000"),
            basic_salary=Decimal("24000"),
        )
    )
    svc.seed(
        EmployeeInfo(
            id=UNPAID_EMPLOYEE_ID,
            company_id=COMPANY_ID,
            first_name="No",
            last_name="Payroll",
            email="nopayroll@example.com",
            hire_date=date(2023, 1, 1),
        )
    )
    set_employee_service(svc)
    yield
    set_employee_service(InMemoryEmployeeService())


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _exit_at(client: AsyncClient, targets: tuple[str, ...], employee_id: uuid.UUID = EMPLOYEE_ID) -> str:
    """Initiate an exit (last working day 2025-06-15) and drive it through ``targets`` as HR."""
    resp = await client.post(
        EXITS_URL,
        json={
            "employee_id": str(employee_id),
            "resignation_date": "2025-05-16",
            "last_working_day": "2025-06-15",
        },
        headers=HR_HEADERS,
    )
    assert resp.status_code == 201, resp.json()
    exit_id: str = resp.json()["id"]
    for target in targets:
        resp = await client.post(
            f"{EXITS_URL}/{exit_id}/transition",
            json={"target_status": target},
            headers=HR_HEADERS,
        )
        assert resp.status_code == 200, resp.json()
    return exit_id


CLEARED = ("manager_approved", "hr_approved", "clearance_completed")


async def _calculate(
    client: AsyncClient,
    exit_id: str,
    body: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    return await client.post(
        f"{EXITS_URL}/{exit_id}/settlement",
        json=body if body is not None else {"payroll_inputs": {}, "exit_inputs": NOTICE_SERVED},
        headers=headers or HR_HEADERS,
    )


# ---------------------------------------------------------------------------
# Stateless calculators
# ---------------------------------------------------------------------------


async def test_calculate_settlement_endpoint(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/settlements/calculate",
        json={
            "employee_info": {
                "monthly_ctc": "60000",
                "basic_salary": "30000",
                "date_of_joining": "2021-07-01",
                "last_working_day": "2025-06-15",
                "leave_balance": "10",
            },
            "payroll_inputs": {"bonus_amount": "2500"},
            "exit_inputs": {
                "notice_period_required": 30,
                "notice_period_served": 10,
                "assets": [{"asset_name": "Laptop", "cost": "50000", "depreciation": "20000", "status": "damaged"}],
            },
        },
    )

    assert resp.status_code == 200, resp.json()
    body = resp.json()
    assert Decimal(body["earnings"]["salary_payable"]) == Decimal("30000")
    assert Decimal(body["earnings"]["leave_encashment"]) == Decimal("10000")
    assert Decimal(body["earnings"]["total_payable"]) == Decimal("42500")
    assert Decimal(body["deductions"]["notice_recovery"]) == Decimal("40000")
    assert Decimal(body["deductions"]["asset_recovery"]) == Decimal("30000")
    assert Decimal(body["net_settlement"]) == Decimal("-27500")
    assert body["settlement_status"] == "employee_pays_company"
    assert body["details"]["asset_recoveries"][0]["reason"] == "Asset damaged - recovery based on depreciation"


async def test_calculate_settlement_endpoint_reports_all_errors(async_client: AsyncClient) -> None:
    resp = await async_client.post("/settlements/calculate", json={"employee_info": {}})

    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "SettlementValidationError"
    assert body["errors"] == [
        "Monthly CTC or Basic Salary is required",
        "Last Working Day is required",
        "Date of Joining is required",
        "Payroll inputs are required",
        "Exit inputs are required",
    ]


async def test_calculate_settlement_endpoint_rejects_unstorable_amounts(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/settlements/calculate",
        json={
            "employee_info": {
                "monthly_ctc": "1e27",
                "date_of_joining": "2021-07-01",
                "last_working_day": "2025-06-15",
            },
            "payroll_inputs": {},
            "exit_inputs": {},
        },
    )

    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"


async def test_calculate_gratuity_endpoint(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/gratuity/calculate",
        json={"last_drawn_salary": "52000", "date_of_joining": "2015-01-01", "last_working_day": "2025-01-01"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["eligible"] is True
    assert Decimal(body["gratuity_amount"]) == Decimal("300041.07")


# ---------------------------------------------------------------------------
# Exit-bound calculations
# ---------------------------------------------------------------------------


async def test_settlement_stored_with_directory_defaults(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)

    resp = await _calculate(async_client, exit_id)

    assert resp.status_code == 201, resp.json()
    body = resp.json()
    assert body["exit_request_id"] == exit_id
    assert body["calculated_by"] == str(HR_ID)
    assert body["details"]["last_working_day"] == "2025-06-15"
    assert body["details"]["date_of_joining"] == "2020-01-01"
    assert body["details"]["employment_type"] == "Full-time"
    assert Decimal(body["earnings"]["salary_payable"]) == Decimal("30000")
    assert Decimal(body["net_settlement"]) == Decimal("30000")
    assert body["settlement_status"] == "company_pays_employee"


async def test_caller_inputs_override_directory(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)

    resp = await _calculate(
        async_client,
        exit_id,
        {
            "employee_info": {"monthly_ctc": "90000", "basic_salary": "36000", "leave_balance": "5"},
            "payroll_inputs": {},
            "exit_inputs": NOTICE_SERVED,
        },
    )

    body = resp.json()
    assert Decimal(body["earnings"]["salary_payable"]) == Decimal("45000")
    assert Decimal(body["earnings"]["leave_encashment"]) == Decimal("6000")


async def test_default_notice_period_is_applied(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)

    resp = await _calculate(async_client, exit_id, {"payroll_inputs": {}, "exit_inputs": {}})

    body = resp.json()
    assert body["details"]["notice_recovery"]["required_days"] == 30
    assert Decimal(body["deductions"]["notice_recovery"]) == Decimal("60000")
    assert Decimal(body["net_settlement"]) == Decimal("-30000")
    assert body["settlement_status"] == "employee_pays_company"


async def test_missing_salary_reports_validation_errors(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED, employee_id=UNPAID_EMPLOYEE_ID)

    resp = await _calculate(async_client, exit_id, {"exit_inputs": {}})

    assert resp.status_code == 422
    assert resp.json()["errors"] == [
        "Monthly CTC or Basic Salary is required",
        "Payroll inputs are required",
    ]

    listing = (await async_client.get(f"{EXITS_URL}/{exit_id}/settlement", headers=HR_HEADERS)).json()
    assert listing["total"] == 0


@pytest.mark.parametrize("targets", [(), ("manager_approved",), ("manager_approved", "hr_approved")])
async def test_settlement_not_allowed_before_clearance(async_client: AsyncClient, targets: tuple[str, ...]) -> None:
    exit_id = await _exit_at(async_client, targets)

    resp = await _calculate(async_client, exit_id)

    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidTransitionError"


async def test_settlement_not_allowed_after_completion(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)
    await _calculate(async_client, exit_id)
    for target in ("settlement_completed", "completed"):
        resp = await async_client.post(
            f"{EXITS_URL}/{exit_id}/transition",
            json={"target_status": target},
            headers=HR_HEADERS,
        )
        assert resp.status_code == 200

    resp = await _calculate(async_client, exit_id)
    assert resp.status_code == 409


async def test_recalculation_allowed_after_settlement_completed(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)
    await _calculate(async_client, exit_id)
    resp = await async_client.post(
        f"{EXITS_URL}/{exit_id}/transition",
        json={"target_status": "settlement_completed"},
        headers=HR_HEADERS,
    )
    assert resp.status_code == 200

    resp = await _calculate(
        async_client,
        exit_id,
        {"payroll_inputs": {"bonus_amount": "1000"}, "exit_inputs": NOTICE_SERVED},
    )
    assert resp.status_code == 201
    assert Decimal(resp.json()["earnings"]["bonus"]) == Decimal("1000")


async def test_employee_cannot_calculate(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)
    resp = await _calculate(async_client, exit_id, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_calculation_unknown_exit(async_client: AsyncClient) -> None:
    resp = await _calculate(async_client, str(uuid.uuid4()))
    assert resp.status_code == 404


async def test_settlement_logged_in_activity(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)
    calculation = (await _calculate(async_client, exit_id)).json()

    entries = (await async_client.get(f"{EXITS_URL}/{exit_id}/activity", headers=HR_HEADERS)).json()["items"]

    entry = entries[-1]
    assert entry["action"] == "settlement_calculated"
    assert entry["details"]["kind"] == "settlement"
    assert entry["details"]["calculation_id"] == calculation["id"]
    assert Decimal(entry["details"]["net_settlement"]) == Decimal(calculation["net_settlement"])
    assert entry["details"]["settlement_status"] == "company_pays_employee"


async def test_each_calculation_is_kept(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)
    first = (await _calculate(async_client, exit_id)).json()
    second = (
        await _calculate(
            async_client,
            exit_id,
            {"payroll_inputs": {"reimbursements": "750.25"}, "exit_inputs": NOTICE_SERVED},
        )
    ).json()

    listing = (await async_client.get(f"{EXITS_URL}/{exit_id}/settlement", headers=HR_HEADERS)).json()
    assert listing["total"] == 2
    assert [item["id"] for item in listing["items"]] == [second["id"], first["id"]]

    latest = (await async_client.get(f"{EXITS_URL}/{exit_id}/settlement/latest", headers=HR_HEADERS)).json()
    assert latest["id"] == second["id"]
    assert Decimal(latest["earnings"]["reimbursements"]) == Decimal("750.25")

    detail = (await async_client.get(f"{EXITS_URL}/{exit_id}", headers=HR_HEADERS)).json()
    assert detail["latest_settlement"]["id"] == second["id"]
    assert detail["progress_percentage"] == 70


async def test_identical_inputs_store_identical_figures(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)
    first = (await _calculate(async_client, exit_id)).json()
    second = (await _calculate(async_client, exit_id)).json()

    for key in ("earnings", "deductions", "net_settlement", "settlement_status", "details"):
        assert first[key] == second[key]
    assert first["id"] != second["id"]


async def test_latest_settlement_missing(async_client: AsyncClient) -> None:
    exit_id = await _exit_at(async_client, CLEARED)
    resp = await async_client.get(f"{EXITS_URL}/{exit_id}/settlement/latest", headers=HR_HEADERS)
    assert resp.status_code == 404


async def test_latest_follows_sequence_when_timestamps_tie(async_client: AsyncClient, db_session: AsyncSession) -> None:
    exit_id = await _exit_at(async_client, CLEARED)
    first = (await _calculate(async_client, exit_id)).json()
    second = (
        await _calculate(
            async_client,
            exit_id,
            {"payroll_inputs": {"bonus_amount": "100"}, "exit_inputs": NOTICE_SERVED},
        )
    ).json()
    assert (first["sequence"], second["sequence"]) == (1, 2)

    await db_session.execute(
        update(SettlementCalculation)
        .where(col(SettlementCalculation.exit_request_id) == uuid.UUID(exit_id))
        .values(calculated_at=datetime(2025, 6, 16, 9, 0, tzinfo=UTC))
    )
    await db_session.commit()

    latest = (await async_client.get(f"{EXITS_URL}/{exit_id}/settlement/latest", headers=HR_HEADERS)).json()
    assert latest["id"] == second["id"]
    listing = (await async_client.get(f"{EXITS_URL}/{exit_id}/settlement", headers=HR_HEADERS)).json()
    assert [item["sequence"] for item in listing["items"]] == [2, 1]
