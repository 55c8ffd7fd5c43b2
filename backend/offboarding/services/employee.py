# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel


class EmployeeInfo(BaseModel):
    """What the Employee Directory knows about a departing employee."""

    id: uuid.UUID
    company_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    department: str | None = None
    manager_id: uuid.UUID | None = None
    employment_type: str | None = None  # e.g. "Full-time"
    hire_date: date | None = None
    monthly_ctc: Decimal | None = None
    basic_salary: Decimal | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def financial_profile(self) -> dict[str, Any]:
        """Settlement inputs the directory can supply, keyed like ``EmployeeFinancialInfo``.

        Unknown values are left out rather than sent as ``None``.
        """
        profile = {
            "date_of_joining": self.hire_date,
            "monthly_ctc": self.monthly_ctc,
            "basic_salary": self.basic_salary,
            "employment_type": self.employment_type,
        }
        return {key: value for key, value in profile.items() if value is not None}


@runtime_checkable
class EmployeeService(Protocol):
    """Read-only view of the Employee Directory."""

    async def get_employee(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None: ...


class InMemoryEmployeeService:
    """Directory backed by a dict, for development and tests."""

    def __init__(self) -> None:
        self._employees: dict[tuple[uuid.UUID, uuid.UUID], EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        self._employees[(employee.company_id, employee.id)] = employee

    async def get_employee(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Look up an employee within one company. Returns None if not found."""
        return self._employees.get((company_id, employee_id))


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Swap the directory implementation (tests, production wiring)."""
    global _employee_service
    _employee_service = service
