# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Path

from offboarding.api.deps import AuthDep, validate_company_scope
from offboarding.db import SessionDep
from offboarding.schemas.clearance import ClearanceChecklistResponse, ClearanceItemResponse, UpsertClearancePayload
from offboarding.services import clearance as clearance_service

clearance_router = APIRouter(
    prefix="/companies/{company_id}/exits/{exit_request_id}/clearance",
    tags=["clearance"],
    dependencies=[Depends(validate_company_scope)],
)


@clearance_router.get("", response_model=ClearanceChecklistResponse)
async def get_clearance_checklist(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ClearanceChecklistResponse:
    """Clearance checklist for an exit request."""
    return await clearance_service.get_clearance_checklist(session, auth.company_id, exit_request_id)


@clearance_router.put("/{department}", response_model=ClearanceItemResponse)
async def upsert_clearance_item(
    exit_request_id: uuid.UUID,
    payload: UpsertClearancePayload,
    session: SessionDep,
    auth: AuthDep,
    department: str = Path(min_length=1, max_length=255),
) -> ClearanceItemResponse:
    """Record a department's clearance decision."""
    return await clearance_service.upsert_clearance_item(session, auth, exit_request_id, department, payload)
