# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Self

from pydantic import BaseModel, Field, model_validator

from offboarding.models.enums import ExitStatus, ExitType
from offboarding.schemas.activity import ActivityLogEntryResponse
from offboarding.schemas.clearance import ClearanceItemResponse
from offboarding.schemas.settlement import SettlementCalculationResponse

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class InitiateExitPayload(BaseModel):
    """Request body for initiating an employee exit."""

    employee_id: uuid.UUID
    resignation_date: date
    last_working_day: date
    exit_type: ExitType = ExitType.RESIGNATION
    reason: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.last_working_day < self.resignation_date:
            msg = "last_working_day must not be before resignation_date"
            raise ValueError(msg)
        return self


class TransitionPayload(BaseModel):
    """Request body for moving an exit request to its next status."""

    target_status: ExitStatus
    note: str | None = Field(default=None, max_length=1000)
    details: dict[str, Any] = {}


class CancelPayload(BaseModel):
    """Request body for cancelling an exit request."""

    reason: str | None = Field(default=None, max_length=1000)
    details: dict[str, Any] = {}


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ExitRequestResponse(BaseModel):
    """Response schema for a single exit request."""

    id: uuid.UUID
    company_id: uuid.UUID
    employee_id: uuid.UUID
    department: str | None
    manager_id: uuid.UUID | None
    resignation_date: date
    last_working_day: date
    exit_type: ExitType
    reason: str | None
    initiated_by: uuid.UUID
    status: ExitStatus
    manager_approved_at: datetime | None
    hr_approved_at: datetime | None
    clearance_completed_at: datetime | None
    settlement_completed_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime


class ExitRequestListResponse(BaseModel):
    """Paginated list of exit requests."""

    items: list[ExitRequestResponse]
    total: int


class ExitRequestDetailResponse(BaseModel):
    """An exit request together with its checklist, latest settlement and history."""

    exit_request: ExitRequestResponse
    clearance: list[ClearanceItemResponse]
    latest_settlement: SettlementCalculationResponse | None
    activity: list[ActivityLogEntryResponse]
    progress_percentage: int


class ExitProgressResponse(BaseModel):
    """How far along the exit process a request is."""

    exit_request_id: uuid.UUID
    status: ExitStatus
    progress_percentage: int
