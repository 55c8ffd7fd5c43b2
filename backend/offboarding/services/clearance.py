# ruff: noqa: TC003
"""Department clearance checklist for exit requests."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from offboarding.exceptions import ExitRequestClosedError, ForbiddenError
from offboarding.models.clearance import ClearanceItem
from offboarding.models.enums import ActivityAction, ClearanceStatus, ExitStatus
from offboarding.schemas.activity import ClearanceDetails
from offboarding.schemas.auth import CLEARANCE_ROLES
from offboarding.schemas.clearance import ClearanceChecklistResponse, ClearanceItemResponse
from offboarding.services.activity import append_activity
from offboarding.services.exit_request import apply_transition, get_exit_request_or_404
from offboarding.services.lifecycle import is_terminal

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from offboarding.schemas.auth import AuthContext
    from offboarding.schemas.clearance import UpsertClearancePayload

logger = logging.getLogger(__name__)


def build_clearance_response(item: ClearanceItem) -> ClearanceItemResponse:
    return ClearanceItemResponse(
        id=item.id,
        exit_request_id=item.exit_request_id,
        department=item.department,
        status=ClearanceStatus(item.status),
        approver_id=item.approver_id,
        notes=item.notes,
        approved_at=item.approved_at,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def all_approved(items: list[ClearanceItem]) -> bool:
    """True when there is at least one item and every item is approved."""
    return bool(items) and all(item.status == ClearanceStatus.APPROVED for item in items)


async def load_clearance_items(session: AsyncSession, exit_request_id: uuid.UUID) -> list[ClearanceItem]:
    result = await session.execute(
        select(ClearanceItem)
        .where(col(ClearanceItem.exit_request_id) == exit_request_id)
        .order_by(col(ClearanceItem.department))
    )
    return list(result.scalars().all())


async def upsert_clearance_item(
    session: AsyncSession,
    auth: AuthContext,
    exit_request_id: uuid.UUID,
    department: str,
    payload: UpsertClearancePayload,
) -> ClearanceItemResponse:
    """Record a department's clearance decision.

    Creates the department's item on first use and overwrites it afterwards.
    When the last outstanding item is approved on an HR_APPROVED request, the
    request moves to CLEARANCE_COMPLETED in the same transaction.
    """
    if auth.role not in CLEARANCE_ROLES:
        raise ForbiddenError("Not authorized to update clearance")

    exit_request = await get_exit_request_or_404(session, auth.company_id, exit_request_id, for_update=True)
    current = ExitStatus(exit_request.status)
    if is_terminal(current):
        raise ExitRequestClosedError(current)

    result = await session.execute(
        select(ClearanceItem).where(
            col(ClearanceItem.exit_request_id) == exit_request_id,
            col(ClearanceItem.department) == department,
        )
    )
    item = result.scalar_one_or_none()
    if item is None:
        item = ClearanceItem(exit_request_id=exit_request_id, department=department)
        session.add(item)

    item.status = payload.status.value
    item.notes = payload.notes
    item.approver_id = auth.user_id
    item.approved_at = datetime.now(UTC) if payload.status == ClearanceStatus.APPROVED else None
    item.updated_at = datetime.now(UTC)
    await session.flush()

    await append_activity(
        session,
        company_id=exit_request.company_id,
        exit_request_id=exit_request_id,
        action=ActivityAction.CLEARANCE_UPDATED,
        actor_id=auth.user_id,
        details=ClearanceDetails(department=department, status=payload.status.value, notes=payload.notes),
    )

    if current == ExitStatus.HR_APPROVED and all_approved(await load_clearance_items(session, exit_request_id)):
        await apply_transition(
            session,
            exit_request,
            ExitStatus.CLEARANCE_COMPLETED,
            auth.user_id,
            ClearanceDetails(department=department, status=payload.status.value, notes=payload.notes),
        )

    await session.commit()
    await session.refresh(item)
    logger.info(
        "Clearance for exit request %s department %s set to %s by %s",
        exit_request_id,
        department,
        payload.status,
        auth.user_id,
    )
    return build_clearance_response(item)


async def get_clearance_checklist(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
) -> ClearanceChecklistResponse:
    """All clearance items for an exit request, ordered by department."""
    await get_exit_request_or_404(session, company_id, exit_request_id)
    items = await load_clearance_items(session, exit_request_id)
    return ClearanceChecklistResponse(
        items=[build_clearance_response(item) for item in items],
        all_approved=all_approved(items),
    )
