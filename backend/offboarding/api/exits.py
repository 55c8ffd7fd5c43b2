# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status

from offboarding.api.deps import AuthDep, validate_company_scope
from offboarding.db import SessionDep
from offboarding.models.enums import ExitStatus, ExitType
from offboarding.schemas.activity import ActivityLogListResponse
from offboarding.schemas.exit_request import (
    CancelPayload,
    ExitProgressResponse,
    ExitRequestDetailResponse,
    ExitRequestListResponse,
    ExitRequestResponse,
    InitiateExitPayload,
    TransitionPayload,
)
from offboarding.services import activity as activity_service
from offboarding.services import exit_request as exit_service
from offboarding.services import overview as overview_service

exits_router = APIRouter(
    prefix="/companies/{company_id}/exits",
    tags=["exits"],
    dependencies=[Depends(validate_company_scope)],
)


@exits_router.post("", response_model=ExitRequestResponse, status_code=status.HTTP_201_CREATED)
async def initiate_exit(
    payload: InitiateExitPayload,
    session: SessionDep,
    auth: AuthDep,
) -> ExitRequestResponse:
    """Initiate an employee exit."""
    return await exit_service.initiate_exit(session, auth, payload)


@exits_router.get("", response_model=ExitRequestListResponse)
async def list_exits(
    session: SessionDep,
    auth: AuthDep,
    status_filter: ExitStatus | None = Query(default=None, alias="status"),
    employee_id: uuid.UUID | None = Query(default=None),
    exit_type: ExitType | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> ExitRequestListResponse:
    """List exit requests with optional filters."""
    return await exit_service.list_exit_requests(
        session, auth.company_id, status_filter, employee_id, exit_type, offset, limit
    )


@exits_router.get("/{exit_request_id}", response_model=ExitRequestDetailResponse)
async def get_exit(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ExitRequestDetailResponse:
    """Get an exit request with its clearance checklist, latest settlement and activity."""
    return await overview_service.get_exit_request_detail(session, auth.company_id, exit_request_id)


@exits_router.post("/{exit_request_id}/transition", response_model=ExitRequestResponse)
async def transition_exit(
    exit_request_id: uuid.UUID,
    payload: TransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> ExitRequestResponse:
    """Move an exit request to its next status."""
    return await exit_service.transition_exit(
        session,
        auth,
        exit_request_id,
        payload.target_status,
        note=payload.note,
        details=payload.details,
    )


@exits_router.post("/{exit_request_id}/cancel", response_model=ExitRequestResponse)
async def cancel_exit(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: CancelPayload | None = None,
) -> ExitRequestResponse:
    """Cancel an exit request that is still in progress."""
    if payload is None:
        return await exit_service.cancel_exit(session, auth, exit_request_id)
    return await exit_service.cancel_exit(
        session, auth, exit_request_id, reason=payload.reason, details=payload.details
    )


@exits_router.delete("/{exit_request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exit(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> Response:
    """Delete an exit request (HR/admin only). Its activity log is kept."""
    await exit_service.delete_exit_request(session, auth, exit_request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@exits_router.get("/{exit_request_id}/progress", response_model=ExitProgressResponse)
async def get_exit_progress(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ExitProgressResponse:
    """How far along the exit process a request is."""
    return await overview_service.get_exit_progress(session, auth.company_id, exit_request_id)


@exits_router.get("/{exit_request_id}/activity", response_model=ActivityLogListResponse)
async def list_exit_activity(
    exit_request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ActivityLogListResponse:
    """Activity log for an exit request, oldest first.

    Entries outlive the request itself, so this works after deletion too.
    """
    return await activity_service.list_activity(session, auth.company_id, exit_request_id)
