# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from offboarding.models.enums import ClearanceStatus


class UpsertClearancePayload(BaseModel):
    """Request body for a department's clearance decision."""

    status: ClearanceStatus
    notes: str | None = Field(default=None, max_length=2000)


class ClearanceItemResponse(BaseModel):
    """Response schema for a clearance checklist item."""

    id: uuid.UUID
    exit_request_id: uuid.UUID
    department: str
    status: ClearanceStatus
    approver_id: uuid.UUID | None
    notes: str | None
    approved_at: datetime | None
    created_at: datetime
    updated_at: datetime


class ClearanceChecklistResponse(BaseModel):
    """Every clearance item for an exit request."""

    items: list[ClearanceItemResponse]
    all_approved: bool
