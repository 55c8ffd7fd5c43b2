# ruff: noqa: TC003
"""Read-side views over an exit request: full detail and progress."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from offboarding.models.enums import ExitStatus
from offboarding.schemas.exit_request import ExitProgressResponse, ExitRequestDetailResponse
from offboarding.services.activity import list_activity
from offboarding.services.clearance import all_approved, build_clearance_response, load_clearance_items
from offboarding.services.exit_request import build_exit_request_response, get_exit_request_or_404
from offboarding.services.recovery import asset_recovery_done, load_asset_recoveries
from offboarding.services.settlement import build_settlement_response, get_latest_settlement_model

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from offboarding.models.clearance import ClearanceItem
    from offboarding.models.exit_request import ExitRequest

# Progress weights, summing to 100.
_WEIGHT_INITIATED = 10
_WEIGHT_MANAGER_APPROVAL = 10
_WEIGHT_HR_APPROVAL = 10
_WEIGHT_CLEARANCE = 15
_WEIGHT_ASSET_RECOVERY = 10
_WEIGHT_SETTLEMENT_CALCULATED = 15
_WEIGHT_SETTLEMENT_COMPLETED = 15
_WEIGHT_COMPLETED = 15


def compute_progress(
    exit_request: ExitRequest,
    clearance_items: list[ClearanceItem],
    *,
    assets_recovered: bool,
    has_settlement: bool,
) -> int:
    """Percentage of the exit process done, from 0 to 100.

    Built from completion stamps and stored data rather than the current
    status, so a cancelled request keeps the progress it had reached.
    """
    progress = _WEIGHT_INITIATED
    if exit_request.manager_approved_at is not None:
        progress += _WEIGHT_MANAGER_APPROVAL
    if exit_request.hr_approved_at is not None:
        progress += _WEIGHT_HR_APPROVAL
    if exit_request.clearance_completed_at is not None or all_approved(clearance_items):
        progress += _WEIGHT_CLEARANCE
    if assets_recovered:
        progress += _WEIGHT_ASSET_RECOVERY
    if has_settlement:
        progress += _WEIGHT_SETTLEMENT_CALCULATED
    if exit_request.settlement_completed_at is not None:
        progress += _WEIGHT_SETTLEMENT_COMPLETED
    if exit_request.completed_at is not None:
        progress += _WEIGHT_COMPLETED
    return min(progress, 100)


async def get_exit_request_detail(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
) -> ExitRequestDetailResponse:
    """Exit request with its clearance checklist, latest settlement and activity."""
    exit_request = await get_exit_request_or_404(session, company_id, exit_request_id)
    items = await load_clearance_items(session, exit_request_id)
    assets = await load_asset_recoveries(session, exit_request_id)
    latest = await get_latest_settlement_model(session, exit_request_id)
    activity = await list_activity(session, company_id, exit_request_id)

    return ExitRequestDetailResponse(
        exit_request=build_exit_request_response(exit_request),
        clearance=[build_clearance_response(item) for item in items],
        latest_settlement=build_settlement_response(latest) if latest is not None else None,
        activity=activity.items,
        progress_percentage=compute_progress(
            exit_request,
            items,
            assets_recovered=asset_recovery_done(exit_request, assets),
            has_settlement=latest is not None,
        ),
    )


async def get_exit_progress(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
) -> ExitProgressResponse:
    exit_request = await get_exit_request_or_404(session, company_id, exit_request_id)
    items = await load_clearance_items(session, exit_request_id)
    assets = await load_asset_recoveries(session, exit_request_id)
    latest = await get_latest_settlement_model(session, exit_request_id)
    return ExitProgressResponse(
        exit_request_id=exit_request.id,
        status=ExitStatus(exit_request.status),
        progress_percentage=compute_progress(
            exit_request,
            items,
            assets_recovered=asset_recovery_done(exit_request, assets),
            has_settlement=latest is not None,
        ),
    )
