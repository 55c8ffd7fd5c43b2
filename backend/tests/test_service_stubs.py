"""Tests for the Employee Directory service stub."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from offboarding.services.employee import (
    EmployeeInfo,
    EmployeeService,
    InMemoryEmployeeService,
    get_employee_service,
    set_employee_service,
)

COMPANY_A = uuid.uuid4()
COMPANY_B = uuid.uuid4()


def _make_employee(company_id: uuid.UUID, name: str = "Jane") -> EmployeeInfo:
    return EmployeeInfo(
        id=uuid.uuid4(),
        company_id=company_id,
        first_name=name,
        last_name="Doe",
        email=f"{name.lower()}@example.com",
        department="Sales",
        hire_date=date(2019, 9, 1),
        monthly_ctc=Decimal("70000"),
    )


# ---------------------------------------------------------------------------
# InMemoryEmployeeService tests
# ---------------------------------------------------------------------------


async def test_employee_service_get_not_found() -> None:
    svc = InMemoryEmployeeService()
    result = await svc.get_employee(COMPANY_A, uuid.uuid4())
    assert result is None


async def test_employee_service_seed_and_get() -> None:
    svc = InMemoryEmployeeService()
    emp = _make_employee(COMPANY_A)
    svc.seed(emp)
    result = await svc.get_employee(COMPANY_A, emp.id)
    assert result is not None
    assert result.id == emp.id
    assert result.hire_date == date(2019, 9, 1)
    assert result.basic_salary is None


async def test_employee_service_scoped_by_company() -> None:
    svc = InMemoryEmployeeService()
    emp = _make_employee(COMPANY_A)
    svc.seed(emp)
    assert await svc.get_employee(COMPANY_B, emp.id) is None


def test_financial_profile_omits_unknown_values() -> None:
    emp = _make_employee(COMPANY_A)
    assert emp.financial_profile() == {
        "date_of_joining": date(2019, 9, 1),
        "monthly_ctc": Decimal("70000"),
    }


def test_financial_profile_keys_match_settlement_inputs() -> None:
    from offboarding.schemas.settlement import EmployeeFinancialInfo

    emp = _make_employee(COMPANY_A).model_copy(update={"basic_salary": Decimal("28000"), "employment_type": "Contract"})
    info = EmployeeFinancialInfo.model_validate(emp.financial_profile())
    assert info.basic_salary == Decimal("28000")
    assert info.employment_type == "Contract"


def test_full_name() -> None:
    assert _make_employee(COMPANY_A, "Alice").full_name == "Alice Doe"


def test_in_memory_service_satisfies_protocol() -> None:
    assert isinstance(InMemoryEmployeeService(), EmployeeService)


def test_set_employee_service_replaces_default() -> None:
    original = get_employee_service()
    replacement = InMemoryEmployeeService()
    try:
        set_employee_service(replacement)
        assert get_employee_service() is replacement
    finally:
        set_employee_service(original)
