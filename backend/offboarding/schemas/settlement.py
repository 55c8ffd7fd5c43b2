# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field

from offboarding.models.enums import AssetCondition, SettlementStatus

_ZERO = Decimal("0.00")

# Input amounts: non-negative, at most ten whole digits so every stored total fits Numeric(12, 2).
Money = Annotated[Decimal, Field(ge=0, max_digits=14, decimal_places=4)]
LeaveDays = Annotated[Decimal, Field(max_digits=7, decimal_places=2)]
NoticeDays = Annotated[int, Field(ge=0, le=3650)]

# ---------------------------------------------------------------------------
# Calculation inputs
#
# Every block and most fields are optional at the schema level so that
# missing facts reach validate_settlement_inputs() and are reported together
# instead of failing request parsing on the first one.
# ---------------------------------------------------------------------------


class EmployeeFinancialInfo(BaseModel):
    """Employee compensation and tenure facts."""

    monthly_ctc: Money | None = None
    basic_salary: Money | None = None
    gross_salary: Money | None = None
    date_of_joining: date | None = None
    last_working_day: date | None = None
    employment_type: str | None = None
    leave_balance: LeaveDays = Field(default=_ZERO, description="Eligible unused leave days")


class PayslipDeductions(BaseModel):
    """Statutory deductions from the final month's payslip."""

    pf_employee: Money = _ZERO
    pf_employer: Money = _ZERO
    esi_employee: Money = _ZERO
    esi_employer: Money = _ZERO
    professional_tax: Money = _ZERO
    tds: Money = _ZERO
    other_deductions: Money = _ZERO


class PayrollInputs(BaseModel):
    """Payroll-side amounts owed to the employee."""

    bonus_amount: Money = _ZERO
    incentives_amount: Money = _ZERO
    reimbursements: Money = _ZERO
    last_payslip: PayslipDeductions | None = None
    is_last_month: bool = True


class AssetInput(BaseModel):
    """An asset issued to the employee and the condition it came back in."""

    asset_id: str | None = None
    asset_name: str | None = None
    cost: Money = _ZERO
    depreciation: Money = _ZERO
    status: str = AssetCondition.RETURNED


class OutstandingAmount(BaseModel):
    """An outstanding loan or salary advance."""

    description: str | None = None
    outstanding: Money = _ZERO


class PendingRecovery(BaseModel):
    """Any other amount the company needs to recover."""

    description: str | None = None
    amount: Money = _ZERO


class ExitInputs(BaseModel):
    """Exit-specific recoveries."""

    assets: list[AssetInput] = []
    notice_period_required: NoticeDays | None = None
    notice_period_served: NoticeDays = 0
    loans: list[OutstandingAmount] = []
    advances: list[OutstandingAmount] = []
    pending_recoveries: list[PendingRecovery] = []


class SettlementInputs(BaseModel):
    """Everything the settlement engine needs."""

    employee_info: EmployeeFinancialInfo | None = None
    payroll_inputs: PayrollInputs | None = None
    exit_inputs: ExitInputs | None = None


# ---------------------------------------------------------------------------
# Calculation outputs
# ---------------------------------------------------------------------------


class SalaryCalculation(BaseModel):
    """Pro-rated salary for the final month."""

    monthly_gross: Decimal
    per_day_salary: Decimal
    days_worked: int
    days_in_month: int
    payable_salary: Decimal


class LeaveEncashmentCalculation(BaseModel):
    """Cash value of unused leave."""

    eligible_leave_days: Decimal
    per_day_basic: Decimal
    encashment_amount: Decimal


class NoticeRecoveryCalculation(BaseModel):
    """Recovery for notice days not served."""

    required_days: int
    served_days: int
    shortfall_days: int
    per_day_gross: Decimal
    recovery_amount: Decimal


class AssetRecoveryLine(BaseModel):
    """Recovery for a single asset."""

    asset_id: str | None
    asset_name: str | None
    status: str
    cost: Decimal
    depreciation: Decimal
    recovery_amount: Decimal
    reason: str


class StatutoryDeductionsBreakdown(BaseModel):
    """Per-head statutory deductions; TDS is zero unless this is the final month."""

    pf_employee: Decimal = _ZERO
    pf_employer: Decimal = _ZERO
    esi_employee: Decimal = _ZERO
    esi_employer: Decimal = _ZERO
    professional_tax: Decimal = _ZERO
    tds: Decimal = _ZERO
    other_deductions: Decimal = _ZERO
    tds_included: bool = False
    total_deductions: Decimal = _ZERO


class SettlementEarnings(BaseModel):
    """Amounts payable to the employee."""

    salary_payable: Decimal
    leave_encashment: Decimal
    bonus: Decimal
    incentives: Decimal
    reimbursements: Decimal
    total_payable: Decimal


class SettlementDeductions(BaseModel):
    """Amounts recoverable from the employee."""

    notice_recovery: Decimal
    asset_recovery: Decimal
    loans: Decimal
    advances: Decimal
    pending_recoveries: Decimal
    statutory_deductions: Decimal
    total_recoverable: Decimal


class SettlementDetails(BaseModel):
    """Intermediate derivations kept for audit and explainability."""

    salary_calculation: SalaryCalculation
    leave_encashment: LeaveEncashmentCalculation
    notice_recovery: NoticeRecoveryCalculation
    asset_recoveries: list[AssetRecoveryLine]
    statutory_deductions: StatutoryDeductionsBreakdown
    last_working_day: date
    date_of_joining: date
    employment_type: str | None


class SettlementResult(BaseModel):
    """Output of the settlement engine. Contains no timestamps so it is reproducible."""

    earnings: SettlementEarnings
    deductions: SettlementDeductions
    net_settlement: Decimal
    settlement_status: SettlementStatus
    details: SettlementDetails


class GratuityInputs(BaseModel):
    """Inputs for the gratuity calculation."""

    last_drawn_salary: Money
    date_of_joining: date
    last_working_day: date


class GratuityResult(BaseModel):
    """Gratuity owed on exit."""

    eligible: bool
    years_of_service: Decimal
    daily_wage: Decimal
    gratuity_amount: Decimal


# ---------------------------------------------------------------------------
# Stored calculation responses
# ---------------------------------------------------------------------------


class SettlementCalculationResponse(SettlementResult):
    """A stored settlement calculation for an exit request."""

    id: uuid.UUID
    exit_request_id: uuid.UUID
    calculated_by: uuid.UUID
    sequence: int
    calculated_at: datetime


class SettlementCalculationListResponse(BaseModel):
    """All settlement calculations for an exit request, newest first."""

    items: list[SettlementCalculationResponse]
    total: int
