"""Exit activity log: append-only audit trail for exit requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import TypeAdapter
from sqlalchemy import func, select
from sqlmodel import col

from offboarding.models.activity import ExitActivityLog
from offboarding.models.enums import ActivityAction
from offboarding.schemas.activity import ActivityDetails, ActivityLogEntryResponse, ActivityLogListResponse

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

_details_adapter: TypeAdapter[ActivityDetails] = TypeAdapter(ActivityDetails)


def build_activity_response(entry: ExitActivityLog) -> ActivityLogEntryResponse:
    """Map a log row to its response, decoding the stored details payload."""
    details = _details_adapter.validate_python(entry.details_json) if entry.details_json is not None else None
    return ActivityLogEntryResponse(
        id=entry.id,  # type: ignore[arg-type]
        exit_request_id=entry.exit_request_id,
        actor_id=entry.actor_id,
        action=ActivityAction(entry.action),
        details=details,
        created_at=entry.created_at,
    )


async def append_activity(
    session: AsyncSession,
    *,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
    action: ActivityAction,
    actor_id: uuid.UUID,
    details: ActivityDetails | None = None,
) -> ExitActivityLog:
    """Append an immutable entry within the caller's transaction.

    There is no update or delete counterpart.
    """
    entry = ExitActivityLog(
        company_id=company_id,
        exit_request_id=exit_request_id,
        actor_id=actor_id,
        action=action.value,
        details_json=details.model_dump(mode="json") if details is not None else None,
    )
    session.add(entry)
    return entry


async def list_activity(
    session: AsyncSession,
    company_id: uuid.UUID,
    exit_request_id: uuid.UUID,
) -> ActivityLogListResponse:
    """Every entry for an exit request, oldest first; ties keep insertion order."""
    filters = [
        col(ExitActivityLog.company_id) == company_id,
        col(ExitActivityLog.exit_request_id) == exit_request_id,
    ]

    count_result = await session.execute(select(func.count()).select_from(ExitActivityLog).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(ExitActivityLog)
        .where(*filters)
        .order_by(col(ExitActivityLog.created_at), col(ExitActivityLog.id))
    )
    entries = list(result.scalars().all())

    return ActivityLogListResponse(
        items=[build_activity_response(e) for e in entries],
        total=total,
    )
