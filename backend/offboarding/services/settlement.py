# ruff: noqa: TC003
"""Settlement calculations bound to an exit request.

The arithmetic lives in ``settlement_engine``; this module fills in defaults
from the exit request, the Employee Directory and the recorded asset
recoveries and dues, stores each calculation and records it in the activity
log.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from offboarding.config import get_settings
from offboarding.exceptions import ForbiddenError, InvalidTransitionError, NotFoundError
from offboarding.models.enums import ActivityAction, ExitStatus, SettlementStatus
from offboarding.models.settlement import SettlementCalculation
from offboarding.schemas.activity import SettlementCalculatedDetails
from offboarding.schemas.settlement import (
    EmployeeFinancialInfo,
    ExitInputs,
    SettlementCalculationListResponse,
    SettlementCalculationResponse,
    SettlementDeductions,
    SettlementDetails,
    SettlementEarnings,
    SettlementInputs,
)
from offboarding.services.activity import append_activity
from offboarding.services.employee import get_employee_service
from offboarding.services.exit_request import get_exit_request_or_404
from offboarding.services.recovery import load_asset_recoveries, load_recoverable_dues, recorded_exit_inputs
from offboarding.services.settlement_engine import calculate_settlement

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from offboarding.models.exit_request import ExitRequest
    from offboarding.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

# Settlement can be (re)calculated once clearance is done, and until the exit is completed.
SETTLEMENT_ELIGIBLE_STATUSES = frozenset({ExitStatus.CLEARANCE_COMPLETED, ExitStatus.SETTLEMENT_COMPLETED})


def build_settlement_response(calculation: SettlementCalculation) -> SettlementCalculationResponse:
    return SettlementCalculationResponse(
        id=calculation.id,
        exit_request_id=calculation.exit_request_id,
        calculated_by=calculation.calculated_by,
        sequence=calculation.sequence,
        calculated_at=calculation.calculated_at,
        earnings=SettlementEarnings(
            salary_payable=calculation.salary_payable,
            leave_encashment=calculation.leave_encashment,
            bonus=calculation.bonus,
            incentives=calculation.incentives,
            reimbursements=calculation.reimbursements,
            total_payable=calculation.total_payable,
        ),
        deductions=SettlementDeductions(
            notice_recovery=calculation.notice_recovery,
            asset_recovery=calculation.asset_recovery,
            loans=calculation.loans,
            advances=calculation.advances,
            pending_recoveries=calculation.pending_recoveries,
            statutory_deductions=calculation.statutory_deductions,
            total_recoverable=calculation.total_recoverable,
        ),
        net_settlement=calculation.net_settlement,
        settlement_status=SettlementStatus(calculation.settlement_status),
        details=SettlementDetails.model_validate(calculation.details_json),
    )


async def _fill_from_directory(
    exit_request: ExitRequest,
    inputs: SettlementInputs,
) -> SettlementInputs:
    """Fill gaps in ``employee_info`` from the exit request and the Employee Directory.

    Values supplied by the caller always win.
    """
    info = inputs.employee_info or EmployeeFinancialInfo()
    employee = await get_employee_service().get_employee(exit_request.company_id, exit_request.employee_id)

    updates: dict[str, object] = {}
    if info.last_working_day is None:
        updates["last_working_day"] = exit_request.last_working_day
    if employee is not None:
        for field, value in employee.financial_profile().items():
            if getattr(info, field) is None:
                updates[field] = value

    return inputs.model_copy(update={"employee_info": info.model_copy(update=updates)})


async def _fill_from_records(
    session: AsyncSession,
    exit_request_id: uuid.UUID,
    inputs: SettlementInputs,
) -> SettlementInputs:
    """Fill ``exit_inputs`` lists from recorded asset recoveries and dues.

    A list the caller sent, even an empty one, is kept as is.
    """
    recorded = recorded_exit_inputs(
        await load_asset_recoveries(session, exit_request_id),
        await load_recoverable_dues(session, exit_request_id),
    )
    if not recorded:
        return inputs
    if inputs.exit_inputs is None:
        return inputs.model_copy(update={"exit_inputs": ExitInputs(**recorded)})
    sent = inputs.exit_inputs.model_fields_set
    updates = {field: value for field, value in recorded.items() if field not in sent}
    return inputs.model_copy(update={"exit_inputs": inputs.exit_inputs.model_copy(update=updates)})


async def _next_sequence(session: AsyncSession, exit_request_id: uuid.UUID) -> int:
    """Next calculation number for a request. Callers hold the request's row lock."""
    result = await session.execute(
        select(func.coalesce(func.max(col(SettlementCalculation.sequence)), 0)).where(
            col(SettlementCalculation.exit_request_id) == exit_request_id
        )
    )
    return int(result.scalar_one()) + 1


async def calculate_for_exit(
    session: AsyncSession,
    auth: AuthContext,
    exit_request_id: uuid.UUID,
    inputs: SettlementInputs,
) -> SettlementCalculationResponse:
    """Calculate and store a settlement for an exit request.

    Each call stores a new calculation; earlier ones are kept.
    """
    if not auth.is_hr:
        raise ForbiddenError("Only HR or admins can calculate settlements")

    exit_request = await get_exit_request_or_404(session, auth.company_id, exit_request_id, for_update=True)
    current = ExitStatus(exit_request.status)
    if current not in SETTLEMENT_ELIGIBLE_STATUSES:
        raise InvalidTransitionError(
            current, "settlement_calculated", "settlement is calculated after clearance is completed"
        )

    filled = await _fill_from_directory(exit_request, inputs)
    filled = await _fill_from_records(session, exit_request.id, filled)
    settings = get_settings()
    result = calculate_settlement(
        filled,
        basic_share_of_ctc=settings.basic_salary_share_of_ctc,
        default_notice_period_days=settings.default_notice_period_days,
    )

    calculation = SettlementCalculation(
        exit_request_id=exit_request.id,
        calculated_by=auth.user_id,
        sequence=await _next_sequence(session, exit_request.id),
        salary_payable=result.earnings.salary_payable,
        leave_encashment=result.earnings.leave_encashment,
        bonus=result.earnings.bonus,
        incentives=result.earnings.incentives,
        reimbursements=result.earnings.reimbursements,
        total_payable=result.earnings.total_payable,
        notice_recovery=result.deductions.notice_recovery,
        asset_recovery=result.deductions.asset_recovery,
        loans=result.deductions.loans,
        advances=result.deductions.advances,
        pending_recoveries=result.deductions.pending_recoveries,
        statutory_deductions=result.deductions.statutory_deductions,
        total_recoverable=result.deductions.total_recoverable,
        net_settlement=result.net_settlement,
        settlement_status=result.settlement_status.value,
        details_json=result.details.model_dump(mode="json"),
        inputs_json=filled.model_dump(mode="json"),
    )
    session.add(calculation)
    await session.flush()

    await append_activity(
        session,
        company_id=exit_request.company_id,
        exit_request_id=exit_request.id,
        action=ActivityAction.SETTLEMENT_CALCULATED,
        actor_id=auth.user_id,
        details=SettlementCalculatedDetails(
            calculation_id=calculation.id,
            total_payable=result.earnings.total_payable,
            total_recoverable=result.deductions.total_recoverable,
            net_settlement=result.net_settlement,
            settlement_status=result.settlement_status,
        ),
    )

    await session.commit()
    await session.refresh(calculation)
    logger.info(
        "Settlement %s calculated for exit request %s: net %s (%s)",
        calculation.id,
        exit_request.id,
        result.net_settlement,
        result.settlement_status,
    )
    return build_settlement_response(calculation)


async def list_settlements(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
) -> SettlementCalculationListResponse:
    """Every stored calculation for an exit request, newest first."""
    await get_exit_request_or_404(session, company_id, exit_request_id)
    filters = [col(SettlementCalculation.exit_request_id) == exit_request_id]

    count_result = await session.execute(select(func.count()).select_from(SettlementCalculation).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(SettlementCalculation)
        .where(*filters)
        .order_by(col(SettlementCalculation.sequence).desc())
    )
    calculations = list(result.scalars().all())

    return SettlementCalculationListResponse(
        items=[build_settlement_response(c) for c in calculations],
        total=total,
    )


async def get_latest_settlement_model(
    session: AsyncSession,
    exit_request_id: uuid.UUID,
) -> SettlementCalculation | None:
    result = await session.execute(
        select(SettlementCalculation)
        .where(col(SettlementCalculation.exit_request_id) == exit_request_id)
        .order_by(col(SettlementCalculation.sequence).desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_latest_settlement(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
) -> SettlementCalculationResponse:
    """The most recent calculation. Raises 404 if none has been stored."""
    await get_exit_request_or_404(session, company_id, exit_request_id)
    calculation = await get_latest_settlement_model(session, exit_request_id)
    if calculation is None:
        raise NotFoundError("No settlement has been calculated for this exit request")
    return build_settlement_response(calculation)
