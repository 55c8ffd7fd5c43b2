# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from offboarding.api.deps import HrDep, validate_company_scope
from offboarding.db import SessionDep
from offboarding.schemas.report import ExitMetricsResponse
from offboarding.services import report as report_service

reports_router = APIRouter(
    prefix="/companies/{company_id}/reports",
    tags=["reports"],
    dependencies=[Depends(validate_company_scope)],
)


@reports_router.get("/exit-metrics", response_model=ExitMetricsResponse)
async def get_exit_metrics(
    company_id: uuid.UUID,
    session: SessionDep,
    auth: HrDep,
) -> ExitMetricsResponse:
    """Exit counts by status and exit type (HR/admin only)."""
    return await report_service.get_exit_metrics(session, company_id)
