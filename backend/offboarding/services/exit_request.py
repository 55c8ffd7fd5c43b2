# ruff: noqa: TC003
"""Exit request state machine.

Every status change goes through ``apply_transition``, which performs a single
conditional UPDATE (``... WHERE status = <expected>``). Two concurrent
transitions on the same request therefore cannot both succeed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from offboarding.exceptions import (
    DuplicateActiveRequestError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
)
from offboarding.models.clearance import ClearanceItem
from offboarding.models.enums import ActivityAction, ExitStatus, ExitType
from offboarding.models.exit_request import ExitRequest
from offboarding.models.recovery import AssetRecovery, RecoverableDue
from offboarding.models.settlement import SettlementCalculation
from offboarding.schemas.activity import (
    CancellationDetails,
    GenericDetails,
    InitiatedDetails,
    TransitionDetails,
)
from offboarding.schemas.exit_request import ExitRequestListResponse, ExitRequestResponse
from offboarding.services.activity import append_activity
from offboarding.services.employee import get_employee_service
from offboarding.services.lifecycle import TERMINAL_STATUSES, timestamp_field_for, validate_transition

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from offboarding.schemas.activity import ActivityDetails
    from offboarding.schemas.auth import AuthContext
    from offboarding.schemas.exit_request import InitiateExitPayload

logger = logging.getLogger(__name__)

_TERMINAL_VALUES = [s.value for s in TERMINAL_STATUSES]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_exit_request_response(exit_request: ExitRequest) -> ExitRequestResponse:
    """Map an exit request model to its response schema."""
    return ExitRequestResponse(
        id=exit_request.id,
        company_id=exit_request.company_id,
        employee_id=exit_request.employee_id,
        department=exit_request.department,
        manager_id=exit_request.manager_id,
        resignation_date=exit_request.resignation_date,
        last_working_day=exit_request.last_working_day,
        exit_type=ExitType(exit_request.exit_type),
        reason=exit_request.reason,
        initiated_by=exit_request.initiated_by,
        status=ExitStatus(exit_request.status),
        manager_approved_at=exit_request.manager_approved_at,
        hr_approved_at=exit_request.hr_approved_at,
        clearance_completed_at=exit_request.clearance_completed_at,
        settlement_completed_at=exit_request.settlement_completed_at,
        completed_at=exit_request.completed_at,
        cancelled_at=exit_request.cancelled_at,
        created_at=exit_request.created_at,
    )


async def get_exit_request_or_404(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> ExitRequest:
    """Fetch an exit request scoped to company. Raises 404 if not found.

    With ``for_update`` the row stays locked until the caller's transaction ends.
    """
    query = select(ExitRequest).where(
        col(ExitRequest.id) == exit_request_id,
        col(ExitRequest.company_id) == company_id,
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    exit_request = result.scalar_one_or_none()
    if exit_request is None:
        raise NotFoundError("Exit request not found")
    return exit_request


async def get_active_request_for_employee(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
) -> ExitRequest | None:
    """The employee's exit request that is neither completed nor cancelled, if any."""
    result = await session.execute(
        select(ExitRequest)
        .where(
            col(ExitRequest.company_id) == company_id,
            col(ExitRequest.employee_id) == employee_id,
            col(ExitRequest.status).not_in(_TERMINAL_VALUES),
        )
        .order_by(col(ExitRequest.created_at).desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _has_settlement(session: AsyncSession, exit_request_id: uuid.UUID) -> bool:
    result = await session.execute(
        select(func.count())
        .select_from(SettlementCalculation)
        .where(col(SettlementCalculation.exit_request_id) == exit_request_id)
    )
    return result.scalar_one() > 0


def _authorize_transition(exit_request: ExitRequest, auth: AuthContext, target: ExitStatus) -> None:
    """Raise 403 if the caller's role may not move the request to ``target``."""
    if auth.is_hr:
        return
    if target == ExitStatus.MANAGER_APPROVED and exit_request.manager_id == auth.user_id:
        return
    if target == ExitStatus.CANCELLED and exit_request.employee_id == auth.user_id:
        return
    raise ForbiddenError(f"Not authorized to move this exit request to '{target}'")


async def apply_transition(
    session: AsyncSession,
    exit_request: ExitRequest,
    target: ExitStatus,
    actor_id: uuid.UUID,
    details: ActivityDetails | None = None,
) -> ExitRequest:
    """Move ``exit_request`` to ``target`` inside the caller's transaction.

    1. Validate ``target`` against the lifecycle table.
    2. Check stage eligibility (settlement must exist before SETTLEMENT_COMPLETED).
    3. Conditional UPDATE of status + completion timestamp.
    4. Append the activity entry.

    Nothing is written unless every check passes. The caller commits.
    """
    request_id = exit_request.id
    current = ExitStatus(exit_request.status)
    try:
        validate_transition(current, target)
        if target == ExitStatus.SETTLEMENT_COMPLETED and not await _has_settlement(session, request_id):
            raise InvalidTransitionError(current, target, "no settlement has been calculated yet")
    except InvalidTransitionError as exc:
        logger.info("Rejected exit transition %s: %s", request_id, exc.message)
        raise

    now = datetime.now(UTC)
    values: dict[str, object] = {"status": target.value}
    timestamp_field = timestamp_field_for(target)
    if timestamp_field is not None:
        values[timestamp_field] = now

    result = await session.execute(
        update(ExitRequest)
        .where(
            col(ExitRequest.id) == request_id,
            col(ExitRequest.status) == current.value,
        )
        .values(**values)
        .execution_options(synchronize_session="evaluate")
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        await session.rollback()
        logger.info("Exit transition %s -> %s lost a concurrent update", request_id, target)
        raise InvalidTransitionError(current, target, "the request was changed by someone else")

    await append_activity(
        session,
        company_id=exit_request.company_id,
        exit_request_id=request_id,
        action=ActivityAction(target.value),
        actor_id=actor_id,
        details=details,
    )
    await session.flush()

    logger.info("Exit request %s moved %s -> %s by %s", request_id, current, target, actor_id)
    return exit_request


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def initiate_exit(
    session: AsyncSession,
    auth: AuthContext,
    payload: InitiateExitPayload,
) -> ExitRequestResponse:
    """Open an exit request in INITIATED state.

    Employees may initiate their own exit; HR and admins may initiate anyone's.
    """
    if payload.employee_id != auth.user_id and not auth.is_hr:
        raise ForbiddenError("Not authorized to initiate an exit for this employee")

    employee = await get_employee_service().get_employee(auth.company_id, payload.employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")

    existing = await get_active_request_for_employee(session, auth.company_id, payload.employee_id)
    if existing is not None:
        raise DuplicateActiveRequestError(payload.employee_id, existing.id)

    exit_request = ExitRequest(
        company_id=auth.company_id,
        employee_id=payload.employee_id,
        department=employee.department,
        manager_id=employee.manager_id,
        resignation_date=payload.resignation_date,
        last_working_day=payload.last_working_day,
        exit_type=payload.exit_type.value,
        reason=payload.reason,
        initiated_by=auth.user_id,
        status=ExitStatus.INITIATED.value,
    )
    session.add(exit_request)

    try:
        await session.flush()
    except IntegrityError:
        # Lost a race with a concurrent initiate for the same employee.
        await session.rollback()
        existing = await get_active_request_for_employee(session, auth.company_id, payload.employee_id)
        if existing is not None:
            raise DuplicateActiveRequestError(payload.employee_id, existing.id) from None
        raise

    await append_activity(
        session,
        company_id=auth.company_id,
        exit_request_id=exit_request.id,
        action=ActivityAction.INITIATED,
        actor_id=auth.user_id,
        details=InitiatedDetails(
            exit_type=payload.exit_type.value,
            resignation_date=payload.resignation_date,
            last_working_day=payload.last_working_day,
            reason=payload.reason,
        ),
    )

    await session.commit()
    await session.refresh(exit_request)
    logger.info("Exit request %s initiated for employee %s", exit_request.id, payload.employee_id)
    return build_exit_request_response(exit_request)


async def transition_exit(
    session: AsyncSession,
    auth: AuthContext,
    exit_request_id: uuid.UUID,
    target_status: ExitStatus,
    *,
    note: str | None = None,
    details: dict[str, object] | None = None,
) -> ExitRequestResponse:
    """Move an exit request to the next stage (or cancel it)."""
    if target_status == ExitStatus.CANCELLED:
        return await cancel_exit(session, auth, exit_request_id, reason=note, details=details)

    exit_request = await get_exit_request_or_404(session, auth.company_id, exit_request_id)
    _authorize_transition(exit_request, auth, target_status)

    await apply_transition(
        session,
        exit_request,
        target_status,
        auth.user_id,
        TransitionDetails(
            from_status=ExitStatus(exit_request.status),
            to_status=target_status,
            note=note,
            extra=dict(details or {}),
        ),
    )

    await session.commit()
    await session.refresh(exit_request)
    return build_exit_request_response(exit_request)


async def cancel_exit(
    session: AsyncSession,
    auth: AuthContext,
    exit_request_id: uuid.UUID,
    reason: str | None = None,
    details: dict[str, object] | None = None,
) -> ExitRequestResponse:
    """Cancel an exit request from any non-terminal status.

    The departing employee or HR/admin can cancel.
    """
    exit_request = await get_exit_request_or_404(session, auth.company_id, exit_request_id)
    _authorize_transition(exit_request, auth, ExitStatus.CANCELLED)

    await apply_transition(
        session,
        exit_request,
        ExitStatus.CANCELLED,
        auth.user_id,
        CancellationDetails(
            from_status=ExitStatus(exit_request.status),
            reason=reason,
            extra=dict(details or {}),
        ),
    )

    await session.commit()
    await session.refresh(exit_request)
    return build_exit_request_response(exit_request)


async def get_exit_request(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
) -> ExitRequestResponse:
    """Get a single exit request by ID."""
    exit_request = await get_exit_request_or_404(session, company_id, exit_request_id)
    return build_exit_request_response(exit_request)


async def list_exit_requests(
    session: AsyncSession,
    company_id: uuid.UUID,
    status_filter: ExitStatus | None = None,
    employee_id: uuid.UUID | None = None,
    exit_type: ExitType | None = None,
    offset: int = 0,
    limit: int = 50,
) -> ExitRequestListResponse:
    """List exit requests with optional filters, newest first."""
    base_filters = [col(ExitRequest.company_id) == company_id]

    if status_filter is not None:
        base_filters.append(col(ExitRequest.status) == status_filter.value)
    if employee_id is not None:
        base_filters.append(col(ExitRequest.employee_id) == employee_id)
    if exit_type is not None:
        base_filters.append(col(ExitRequest.exit_type) == exit_type.value)

    count_result = await session.execute(select(func.count()).select_from(ExitRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(ExitRequest)
        .where(*base_filters)
        .order_by(col(ExitRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    exit_requests = list(result.scalars().all())

    return ExitRequestListResponse(
        items=[build_exit_request_response(r) for r in exit_requests],
        total=total,
    )


async def delete_exit_request(
    session: AsyncSession,
    auth: AuthContext,
    exit_request_id: uuid.UUID,
) -> None:
    """Administrative delete: removes the request and every record attached to it.

    Activity entries are kept; a final DELETED entry records who removed it.
    """
    if not auth.is_hr:
        raise ForbiddenError("Only HR or admins can delete exit requests")

    exit_request = await get_exit_request_or_404(session, auth.company_id, exit_request_id, for_update=True)

    await append_activity(
        session,
        company_id=exit_request.company_id,
        exit_request_id=exit_request.id,
        action=ActivityAction.DELETED,
        actor_id=auth.user_id,
        details=GenericDetails(data={"status": exit_request.status, "employee_id": str(exit_request.employee_id)}),
    )
    await session.execute(delete(ClearanceItem).where(col(ClearanceItem.exit_request_id) == exit_request.id))
    await session.execute(delete(AssetRecovery).where(col(AssetRecovery.exit_request_id) == exit_request.id))
    await session.execute(delete(RecoverableDue).where(col(RecoverableDue.exit_request_id) == exit_request.id))
    await session.execute(
        delete(SettlementCalculation).where(col(SettlementCalculation.exit_request_id) == exit_request.id)
    )
    await session.delete(exit_request)

    await session.commit()
    logger.info("Exit request %s deleted by %s", exit_request_id, auth.user_id)
