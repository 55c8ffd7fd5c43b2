# ruff: noqa: TC003
"""Asset recovery and recoverable dues recorded against an exit request.

These records feed the exit-inputs block of a settlement calculation when the
caller does not supply it.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from offboarding.exceptions import ExitRequestClosedError, ForbiddenError
from offboarding.models.enums import ActivityAction, AssetRecoveryStatus, DueType, ExitStatus
from offboarding.models.recovery import AssetRecovery, RecoverableDue
from offboarding.schemas.activity import AssetRecoveryDetails, RecoverableDueDetails
from offboarding.schemas.recovery import (
    AssetRecoveryListResponse,
    AssetRecoveryResponse,
    RecoverableDueListResponse,
    RecoverableDueResponse,
)
from offboarding.schemas.settlement import AssetInput, OutstandingAmount, PendingRecovery
from offboarding.services.activity import append_activity
from offboarding.services.exit_request import get_exit_request_or_404
from offboarding.services.lifecycle import is_terminal

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from offboarding.models.exit_request import ExitRequest
    from offboarding.schemas.auth import AuthContext
    from offboarding.schemas.recovery import UpsertAssetRecoveryPayload, UpsertRecoverableDuePayload

logger = logging.getLogger(__name__)


def build_asset_recovery_response(asset: AssetRecovery) -> AssetRecoveryResponse:
    return AssetRecoveryResponse(
        id=asset.id,
        exit_request_id=asset.exit_request_id,
        asset_id=asset.asset_id,
        asset_name=asset.asset_name,
        cost=asset.cost,
        depreciation=asset.depreciation,
        status=AssetRecoveryStatus(asset.status),
        remarks=asset.remarks,
        recovered_by=asset.recovered_by,
        created_at=asset.created_at,
        updated_at=asset.updated_at,
    )


def build_due_response(due: RecoverableDue) -> RecoverableDueResponse:
    return RecoverableDueResponse(
        id=due.id,
        exit_request_id=due.exit_request_id,
        due_type=due.due_type,
        description=due.description,
        amount=due.amount,
        notes=due.notes,
        recorded_by=due.recorded_by,
        created_at=due.created_at,
        updated_at=due.updated_at,
    )


def asset_recovery_done(exit_request: ExitRequest, assets: list[AssetRecovery]) -> bool:
    """No asset is still pending, and either assets were recorded or clearance is done."""
    if any(asset.status == AssetRecoveryStatus.PENDING for asset in assets):
        return False
    return bool(assets) or exit_request.clearance_completed_at is not None


def recorded_exit_inputs(assets: list[AssetRecovery], dues: list[RecoverableDue]) -> dict[str, Any]:
    """Settlement exit inputs derived from the recorded assets and dues.

    Only categories with at least one record are returned, keyed like ``ExitInputs``.
    """
    fields: dict[str, Any] = {}
    if assets:
        fields["assets"] = [
            AssetInput(
                asset_id=asset.asset_id,
                asset_name=asset.asset_name,
                cost=asset.cost,
                depreciation=asset.depreciation,
                status=asset.status,
            )
            for asset in assets
        ]
    loans = [
        OutstandingAmount(description=d.description, outstanding=d.amount) for d in dues if d.due_type == DueType.LOAN
    ]
    advances = [
        OutstandingAmount(description=d.description, outstanding=d.amount)
        for d in dues
        if d.due_type == DueType.ADVANCE
    ]
    others = [
        PendingRecovery(description=d.description or d.due_type, amount=d.amount)
        for d in dues
        if d.due_type not in (DueType.LOAN, DueType.ADVANCE)
    ]
    if loans:
        fields["loans"] = loans
    if advances:
        fields["advances"] = advances
    if others:
        fields["pending_recoveries"] = others
    return fields


async def load_asset_recoveries(session: AsyncSession, exit_request_id: uuid.UUID) -> list[AssetRecovery]:
    result = await session.execute(
        select(AssetRecovery)
        .where(col(AssetRecovery.exit_request_id) == exit_request_id)
        .order_by(col(AssetRecovery.asset_id))
    )
    return list(result.scalars().all())


async def load_recoverable_dues(session: AsyncSession, exit_request_id: uuid.UUID) -> list[RecoverableDue]:
    result = await session.execute(
        select(RecoverableDue)
        .where(col(RecoverableDue.exit_request_id) == exit_request_id)
        .order_by(col(RecoverableDue.due_type))
    )
    return list(result.scalars().all())


async def _lock_open_request(session: AsyncSession, auth: AuthContext, exit_request_id: uuid.UUID) -> ExitRequest:
    exit_request = await get_exit_request_or_404(session, auth.company_id, exit_request_id, for_update=True)
    current = ExitStatus(exit_request.status)
    if is_terminal(current):
        raise ExitRequestClosedError(current)
    return exit_request


async def upsert_asset_recovery(
    session: AsyncSession,
    auth: AuthContext,
    exit_request_id: uuid.UUID,
    asset_id: str,
    payload: UpsertAssetRecoveryPayload,
) -> AssetRecoveryResponse:
    """Record an asset and its recovery status. Creates the row on first use."""
    if not auth.is_hr:
        raise ForbiddenError("Only HR or admins can update asset recovery")

    exit_request = await _lock_open_request(session, auth, exit_request_id)

    result = await session.execute(
        select(AssetRecovery).where(
            col(AssetRecovery.exit_request_id) == exit_request_id,
            col(AssetRecovery.asset_id) == asset_id,
        )
    )
    asset = result.scalar_one_or_none()
    if asset is None:
        asset = AssetRecovery(exit_request_id=exit_request_id, asset_id=asset_id)
        session.add(asset)

    asset.asset_name = payload.asset_name
    asset.cost = payload.cost
    asset.depreciation = payload.depreciation
    asset.status = payload.status.value
    asset.remarks = payload.remarks
    asset.recovered_by = None if payload.status == AssetRecoveryStatus.PENDING else auth.user_id
    asset.updated_at = datetime.now(UTC)
    await session.flush()

    await append_activity(
        session,
        company_id=exit_request.company_id,
        exit_request_id=exit_request_id,
        action=ActivityAction.ASSET_RECOVERY_UPDATED,
        actor_id=auth.user_id,
        details=AssetRecoveryDetails(
            asset_id=asset_id,
            asset_name=payload.asset_name,
            status=payload.status.value,
            cost=payload.cost,
        ),
    )

    await session.commit()
    await session.refresh(asset)
    logger.info("Asset %s on exit request %s set to %s by %s", asset_id, exit_request_id, payload.status, auth.user_id)
    return build_asset_recovery_response(asset)


async def list_asset_recoveries(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
) -> AssetRecoveryListResponse:
    exit_request = await get_exit_request_or_404(session, company_id, exit_request_id)
    assets = await load_asset_recoveries(session, exit_request_id)
    return AssetRecoveryListResponse(
        items=[build_asset_recovery_response(a) for a in assets],
        all_recovered=asset_recovery_done(exit_request, assets),
    )


async def upsert_recoverable_due(
    session: AsyncSession,
    auth: AuthContext,
    exit_request_id: uuid.UUID,
    due_type: str,
    payload: UpsertRecoverableDuePayload,
) -> RecoverableDueResponse:
    """Record or revise the amount owed under one due type."""
    if not auth.is_hr:
        raise ForbiddenError("Only HR or admins can manage recoverable dues")

    exit_request = await _lock_open_request(session, auth, exit_request_id)
    due_type = due_type.strip().lower()

    result = await session.execute(
        select(RecoverableDue).where(
            col(RecoverableDue.exit_request_id) == exit_request_id,
            col(RecoverableDue.due_type) == due_type,
        )
    )
    due = result.scalar_one_or_none()
    if due is None:
        due = RecoverableDue(exit_request_id=exit_request_id, due_type=due_type, recorded_by=auth.user_id)
        session.add(due)

    due.amount = payload.amount
    due.description = payload.description
    due.notes = payload.notes
    due.recorded_by = auth.user_id
    due.updated_at = datetime.now(UTC)
    await session.flush()

    await append_activity(
        session,
        company_id=exit_request.company_id,
        exit_request_id=exit_request_id,
        action=ActivityAction.DUE_RECORDED,
        actor_id=auth.user_id,
        details=RecoverableDueDetails(due_type=due_type, amount=payload.amount, description=payload.description),
    )

    await session.commit()
    await session.refresh(due)
    logger.info("Due %s on exit request %s set to %s by %s", due_type, exit_request_id, payload.amount, auth.user_id)
    return build_due_response(due)


async def list_recoverable_dues(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
) -> RecoverableDueListResponse:
    await get_exit_request_or_404(session, company_id, exit_request_id)
    dues = await load_recoverable_dues(session, exit_request_id)
    return RecoverableDueListResponse(
        items=[build_due_response(d) for d in dues],
        total_amount=sum((d.amount for d in dues), Decimal("0.00")),
    )
