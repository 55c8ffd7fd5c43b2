"""Final settlement calculation engine.

Pure functions: no database, no clock, no settings lookups. Identical inputs
always produce an identical ``SettlementResult``.

Every monetary sub-component is rounded to 2 decimal places (half away from
zero) before it is summed, so stored components always add up to the stored
totals and ``net_settlement == total_payable - total_recoverable`` exactly.

Day divisors
------------
Salary payable is pro-rated over the actual length of the last working day's
calendar month (28-31). Leave encashment and notice recovery use a fixed
30-day month. This mismatch is the payroll convention the numbers are
reconciled against; keep it as is.
"""

from __future__ import annotations

from calendar import monthrange
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from offboarding.exceptions import SettlementValidationError
from offboarding.models.enums import AssetCondition, SettlementStatus
from offboarding.schemas.settlement import (
    AssetRecoveryLine,
    GratuityResult,
    LeaveEncashmentCalculation,
    NoticeRecoveryCalculation,
    SalaryCalculation,
    SettlementDeductions,
    SettlementDetails,
    SettlementEarnings,
    SettlementResult,
    StatutoryDeductionsBreakdown,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from offboarding.schemas.settlement import (
        AssetInput,
        EmployeeFinancialInfo,
        ExitInputs,
        GratuityInputs,
        PayrollInputs,
        PayslipDeductions,
        SettlementInputs,
    )

_CENT = Decimal("0.01")
_ZERO = Decimal("0.00")
_FIXED_MONTH_DAYS = Decimal(30)
_GRATUITY_WAGE_DAYS = Decimal(26)
_GRATUITY_DAYS_PER_YEAR = Decimal(15)
_DAYS_PER_YEAR = Decimal("365.25")

DEFAULT_BASIC_SHARE_OF_CTC = Decimal("0.40")
DEFAULT_NOTICE_PERIOD_DAYS = 30
DEFAULT_GRATUITY_MIN_SERVICE_YEARS = 5

# Numeric(12, 2) holds ten whole digits.
MAX_STORED_AMOUNT = Decimal("9999999999.99")


def round_money(value: Decimal | int) -> Decimal:
    """Round to cents, half away from zero."""
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def _sum_rounded(values: Iterable[Decimal]) -> Decimal:
    return sum((round_money(v) for v in values), _ZERO)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


def validate_settlement_inputs(inputs: SettlementInputs) -> list[str]:
    """Return every missing-field problem in ``inputs``. Empty means valid."""
    errors: list[str] = []

    info = inputs.employee_info
    if info is None:
        errors.append("Employee info is required")
    else:
        if not info.monthly_ctc and not info.basic_salary:
            errors.append("Monthly CTC or Basic Salary is required")
        if info.last_working_day is None:
            errors.append("Last Working Day is required")
        if info.date_of_joining is None:
            errors.append("Date of Joining is required")

    if inputs.payroll_inputs is None:
        errors.append("Payroll inputs are required")

    if inputs.exit_inputs is None:
        errors.append("Exit inputs are required")

    return errors


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


def calculate_salary_payable(monthly_gross: Decimal, last_working_day: date) -> SalaryCalculation:
    """Salary for the days worked in the final month, over that month's real length."""
    days_in_month = monthrange(last_working_day.year, last_working_day.month)[1]
    days_worked = last_working_day.day
    return SalaryCalculation(
        monthly_gross=round_money(monthly_gross),
        per_day_salary=round_money(monthly_gross / days_in_month),
        days_worked=days_worked,
        days_in_month=days_in_month,
        payable_salary=round_money(monthly_gross * days_worked / days_in_month),
    )


def calculate_leave_encashment(eligible_leave_days: Decimal, basic_salary: Decimal) -> LeaveEncashmentCalculation:
    """Unused leave paid at basic salary over a fixed 30-day month."""
    if eligible_leave_days <= 0:
        return LeaveEncashmentCalculation(eligible_leave_days=_ZERO, per_day_basic=_ZERO, encashment_amount=_ZERO)
    return LeaveEncashmentCalculation(
        eligible_leave_days=eligible_leave_days,
        per_day_basic=round_money(basic_salary / _FIXED_MONTH_DAYS),
        encashment_amount=round_money(eligible_leave_days * basic_salary / _FIXED_MONTH_DAYS),
    )


def calculate_notice_recovery(
    required_days: int,
    served_days: int,
    monthly_gross: Decimal,
) -> NoticeRecoveryCalculation:
    """Gross salary over a fixed 30-day month for every notice day not served."""
    per_day_gross = round_money(monthly_gross / _FIXED_MONTH_DAYS)
    if served_days >= required_days:
        return NoticeRecoveryCalculation(
            required_days=required_days,
            served_days=served_days,
            shortfall_days=0,
            per_day_gross=per_day_gross,
            recovery_amount=_ZERO,
        )
    shortfall = required_days - served_days
    return NoticeRecoveryCalculation(
        required_days=required_days,
        served_days=served_days,
        shortfall_days=shortfall,
        per_day_gross=per_day_gross,
        recovery_amount=round_money(monthly_gross * shortfall / _FIXED_MONTH_DAYS),
    )


def calculate_asset_recovery(asset: AssetInput) -> AssetRecoveryLine:
    """Recovery owed for one asset, based on the condition it came back in."""
    status = asset.status.strip().lower()

    if status in (AssetCondition.RETURNED, AssetCondition.GOOD):
        amount, reason = _ZERO, "Asset returned in good condition"
    elif status == AssetCondition.DAMAGED:
        amount = round_money(max(_ZERO, asset.cost - asset.depreciation))
        reason = "Asset damaged - recovery based on depreciation"
    elif status == AssetCondition.LOST:
        amount, reason = round_money(asset.cost), "Asset lost - full recovery"
    else:
        amount, reason = _ZERO, "No recovery required"

    return AssetRecoveryLine(
        asset_id=asset.asset_id,
        asset_name=asset.asset_name,
        status=status,
        cost=asset.cost,
        depreciation=asset.depreciation,
        recovery_amount=amount,
        reason=reason,
    )


def calculate_statutory_deductions(
    payslip: PayslipDeductions | None,
    *,
    is_last_month: bool,
) -> StatutoryDeductionsBreakdown:
    """PF, ESI, professional tax and other deductions, plus TDS in the final month only."""
    if payslip is None:
        return StatutoryDeductionsBreakdown(tds_included=is_last_month)

    heads = {
        "pf_employee": round_money(payslip.pf_employee),
        "pf_employer": round_money(payslip.pf_employer),
        "esi_employee": round_money(payslip.esi_employee),
        "esi_employer": round_money(payslip.esi_employer),
        "professional_tax": round_money(payslip.professional_tax),
        "tds": round_money(payslip.tds) if is_last_month else _ZERO,
        "other_deductions": round_money(payslip.other_deductions),
    }
    return StatutoryDeductionsBreakdown(
        **heads,
        tds_included=is_last_month,
        total_deductions=sum(heads.values(), _ZERO),
    )


def derive_settlement_status(net_settlement: Decimal) -> SettlementStatus:
    """Exact sign check; zero is fully settled."""
    if net_settlement > 0:
        return SettlementStatus.COMPANY_PAYS_EMPLOYEE
    if net_settlement < 0:
        return SettlementStatus.EMPLOYEE_PAYS_COMPANY
    return SettlementStatus.FULLY_SETTLED


# ---------------------------------------------------------------------------
# Full settlement
# ---------------------------------------------------------------------------


def calculate_final_settlement(
    employee_info: EmployeeFinancialInfo,
    payroll_inputs: PayrollInputs,
    exit_inputs: ExitInputs,
    *,
    basic_share_of_ctc: Decimal = DEFAULT_BASIC_SHARE_OF_CTC,
    default_notice_period_days: int = DEFAULT_NOTICE_PERIOD_DAYS,
) -> SettlementResult:
    """Compute the itemised settlement. Inputs must already have passed validation."""
    if employee_info.last_working_day is None or employee_info.date_of_joining is None:
        msg = "calculate_final_settlement requires validated inputs"
        raise ValueError(msg)

    monthly_gross = employee_info.gross_salary or employee_info.monthly_ctc or employee_info.basic_salary or _ZERO
    if employee_info.basic_salary is not None:
        basic_salary = employee_info.basic_salary
    else:
        basic_salary = (employee_info.monthly_ctc or _ZERO) * basic_share_of_ctc

    # Earnings
    salary = calculate_salary_payable(monthly_gross, employee_info.last_working_day)
    leave = calculate_leave_encashment(employee_info.leave_balance, basic_salary)
    bonus = round_money(payroll_inputs.bonus_amount)
    incentives = round_money(payroll_inputs.incentives_amount)
    reimbursements = round_money(payroll_inputs.reimbursements)
    total_payable = salary.payable_salary + leave.encashment_amount + bonus + incentives + reimbursements

    # Recoveries
    required_days = exit_inputs.notice_period_required
    if required_days is None:
        required_days = default_notice_period_days
    notice = calculate_notice_recovery(required_days, exit_inputs.notice_period_served, monthly_gross)
    asset_lines = [calculate_asset_recovery(asset) for asset in exit_inputs.assets]
    asset_recovery = sum((line.recovery_amount for line in asset_lines), _ZERO)
    loans = _sum_rounded(loan.outstanding for loan in exit_inputs.loans)
    advances = _sum_rounded(advance.outstanding for advance in exit_inputs.advances)
    pending = _sum_rounded(recovery.amount for recovery in exit_inputs.pending_recoveries)
    statutory = calculate_statutory_deductions(payroll_inputs.last_payslip, is_last_month=payroll_inputs.is_last_month)
    total_recoverable = (
        notice.recovery_amount + asset_recovery + loans + advances + pending + statutory.total_deductions
    )

    net_settlement = total_payable - total_recoverable

    return SettlementResult(
        earnings=SettlementEarnings(
            salary_payable=salary.payable_salary,
            leave_encashment=leave.encashment_amount,
            bonus=bonus,
            incentives=incentives,
            reimbursements=reimbursements,
            total_payable=total_payable,
        ),
        deductions=SettlementDeductions(
            notice_recovery=notice.recovery_amount,
            asset_recovery=asset_recovery,
            loans=loans,
            advances=advances,
            pending_recoveries=pending,
            statutory_deductions=statutory.total_deductions,
            total_recoverable=total_recoverable,
        ),
        net_settlement=net_settlement,
        settlement_status=derive_settlement_status(net_settlement),
        details=SettlementDetails(
            salary_calculation=salary,
            leave_encashment=leave,
            notice_recovery=notice,
            asset_recoveries=asset_lines,
            statutory_deductions=statutory,
            last_working_day=employee_info.last_working_day,
            date_of_joining=employee_info.date_of_joining,
            employment_type=employee_info.employment_type,
        ),
    )


def calculate_settlement(
    inputs: SettlementInputs,
    *,
    basic_share_of_ctc: Decimal = DEFAULT_BASIC_SHARE_OF_CTC,
    default_notice_period_days: int = DEFAULT_NOTICE_PERIOD_DAYS,
) -> SettlementResult:
    """Validate ``inputs`` and compute the settlement.

    Raises SettlementValidationError with the complete list of problems.
    """
    errors = validate_settlement_inputs(inputs)
    info, payroll, exit_inputs = inputs.employee_info, inputs.payroll_inputs, inputs.exit_inputs
    if errors or info is None or payroll is None or exit_inputs is None:
        raise SettlementValidationError(errors)
    result = calculate_final_settlement(
        info,
        payroll,
        exit_inputs,
        basic_share_of_ctc=basic_share_of_ctc,
        default_notice_period_days=default_notice_period_days,
    )
    out_of_range = [
        name
        for name, value in (
            *result.earnings.model_dump().items(),
            *result.deductions.model_dump().items(),
            ("net_settlement", result.net_settlement),
        )
        if abs(value) > MAX_STORED_AMOUNT
    ]
    if out_of_range:
        raise SettlementValidationError(
            [f"{name} exceeds the largest storable amount ({MAX_STORED_AMOUNT})" for name in out_of_range]
        )
    return result


# ---------------------------------------------------------------------------
# Gratuity
# ---------------------------------------------------------------------------


def calculate_gratuity(
    inputs: GratuityInputs,
    *,
    min_service_years: int = DEFAULT_GRATUITY_MIN_SERVICE_YEARS,
) -> GratuityResult:
    """15 days' wages (monthly salary / 26) per year of service, once the minimum tenure is met."""
    service_days = (inputs.last_working_day - inputs.date_of_joining).days
    years_of_service = Decimal(max(service_days, 0)) / _DAYS_PER_YEAR
    daily_wage = inputs.last_drawn_salary / _GRATUITY_WAGE_DAYS
    eligible = years_of_service >= min_service_years

    amount = _ZERO
    if eligible:
        amount = round_money(daily_wage * _GRATUITY_DAYS_PER_YEAR * years_of_service)

    return GratuityResult(
        eligible=eligible,
        years_of_service=round_money(years_of_service),
        daily_wage=round_money(daily_wage),
        gratuity_amount=amount,
    )
