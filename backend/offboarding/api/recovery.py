# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Path

from offboarding.api.deps import AuthDep, validate_company_scope
from offboarding.db import SessionDep
from offboarding.schemas.recovery import (
    AssetRecoveryListResponse,
    AssetRecoveryResponse,
    RecoverableDueListResponse,
    RecoverableDueResponse,
    UpsertAssetRecoveryPayload,
    UpsertRecoverableDuePayload,
)
from offboarding.services import recovery as recovery_service

recovery_router = APIRouter(
    prefix="/companies/{company_id}/exits/{exit_request_id}",
    tags=["recovery"],
    dependencies=[Depends(validate_company_scope)],
)


@recovery_router.get("/assets", response_model=AssetRecoveryListResponse)
async def list_asset_recoveries(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> AssetRecoveryListResponse:
    """Assets issued to the employee and their recovery status."""
    return await recovery_service.list_asset_recoveries(session, auth.company_id, exit_request_id)


@recovery_router.put("/assets/{asset_id}", response_model=AssetRecoveryResponse)
async def upsert_asset_recovery(
    exit_request_id: uuid.UUID,
    payload: UpsertAssetRecoveryPayload,
    session: SessionDep,
    auth: AuthDep,
    asset_id: str = Path(min_length=1, max_length=100),
) -> AssetRecoveryResponse:
    """Record an asset's recovery status (HR/admin)."""
    return await recovery_service.upsert_asset_recovery(session, auth, exit_request_id, asset_id, payload)


@recovery_router.get("/dues", response_model=RecoverableDueListResponse)
async def list_recoverable_dues(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RecoverableDueListResponse:
    """Amounts the employee owes, by due type."""
    return await recovery_service.list_recoverable_dues(session, auth.company_id, exit_request_id)


@recovery_router.put("/dues/{due_type}", response_model=RecoverableDueResponse)
async def upsert_recoverable_due(
    exit_request_id: uuid.UUID,
    payload: UpsertRecoverableDuePayload,
    session: SessionDep,
    auth: AuthDep,
    due_type: str = Path(min_length=1, max_length=50),
) -> RecoverableDueResponse:
    """Record or revise a due (HR/admin). ``loan`` and ``advance`` have their own settlement lines."""
    return await recovery_service.upsert_recoverable_due(session, auth, exit_request_id, due_type, payload)
