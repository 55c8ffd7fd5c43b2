# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status

from offboarding.api.deps import AuthDep, validate_company_scope
from offboarding.config import get_settings
from offboarding.db import SessionDep
from offboarding.schemas.settlement import (
    GratuityInputs,
    GratuityResult,
    SettlementCalculationListResponse,
    SettlementCalculationResponse,
    SettlementInputs,
    SettlementResult,
)
from offboarding.services import settlement as settlement_service
from offboarding.services import settlement_engine

# Stateless calculators: nothing is stored.
calculator_router = APIRouter(tags=["settlements"])

exit_settlement_router = APIRouter(
    prefix="/companies/{company_id}/exits/{exit_request_id}/settlement",
    tags=["settlements"],
    dependencies=[Depends(validate_company_scope)],
)


@calculator_router.post("/settlements/calculate", response_model=SettlementResult)
async def calculate_settlement(inputs: SettlementInputs) -> SettlementResult:
    """Calculate a final settlement without storing it."""
    settings = get_settings()
    return settlement_engine.calculate_settlement(
        inputs,
        basic_share_of_ctc=settings.basic_salary_share_of_ctc,
        default_notice_period_days=settings.default_notice_period_days,
    )


@calculator_router.post("/gratuity/calculate", response_model=GratuityResult)
async def calculate_gratuity(inputs: GratuityInputs) -> GratuityResult:
    """Calculate gratuity owed on exit."""
    return settlement_engine.calculate_gratuity(inputs, min_service_years=get_settings().gratuity_min_service_years)


@exit_settlement_router.post(
    "",
    response_model=SettlementCalculationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def calculate_for_exit(
    exit_request_id: uuid.UUID,
    inputs: SettlementInputs,
    session: SessionDep,
    auth: AuthDep,
) -> SettlementCalculationResponse:
    """Calculate and store a settlement for an exit request (HR/admin only)."""
    return await settlement_service.calculate_for_exit(session, auth, exit_request_id, inputs)


@exit_settlement_router.get("", response_model=SettlementCalculationListResponse)
async def list_settlements(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> SettlementCalculationListResponse:
    """Every stored calculation for an exit request, newest first."""
    return await settlement_service.list_settlements(session, auth.company_id, exit_request_id)


@exit_settlement_router.get("/latest", response_model=SettlementCalculationResponse)
async def get_latest_settlement(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> SettlementCalculationResponse:
    """The most recent stored calculation."""
    return await settlement_service.get_latest_settlement(session, auth.company_id, exit_request_id)
