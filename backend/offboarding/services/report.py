"""Reporting service: exit counts by status and exit type."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from offboarding.models.exit_request import ExitRequest
from offboarding.schemas.report import ExitMetricsResponse
from offboarding.services.lifecycle import TERMINAL_STATUSES

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession


async def get_exit_metrics(session: AsyncSession, company_id: uuid.UUID) -> ExitMetricsResponse:
    """Count a company's exit requests, grouped by status and by exit type."""
    status_result = await session.execute(
        select(col(ExitRequest.status), func.count())
        .where(col(ExitRequest.company_id) == company_id)
        .group_by(col(ExitRequest.status))
    )
    by_status = {str(status): count for status, count in status_result.all()}

    type_result = await session.execute(
        select(col(ExitRequest.exit_type), func.count())
        .where(col(ExitRequest.company_id) == company_id)
        .group_by(col(ExitRequest.exit_type))
    )
    by_exit_type = {str(exit_type): count for exit_type, count in type_result.all()}

    terminal = {s.value for s in TERMINAL_STATUSES}
    return ExitMetricsResponse(
        total_exits=sum(by_status.values()),
        open_exits=sum(count for status, count in by_status.items() if status not in terminal),
        by_status=by_status,
        by_exit_type=by_exit_type,
    )
