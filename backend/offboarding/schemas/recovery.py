# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from offboarding.models.enums import AssetRecoveryStatus
from offboarding.schemas.settlement import Money


class UpsertAssetRecoveryPayload(BaseModel):
    """Request body for an asset's recovery status."""

    asset_name: str | None = Field(default=None, max_length=255)
    cost: Money = Decimal("0.00")
    depreciation: Money = Decimal("0.00")
    status: AssetRecoveryStatus
    remarks: str | None = Field(default=None, max_length=2000)


class AssetRecoveryResponse(BaseModel):
    id: uuid.UUID
    exit_request_id: uuid.UUID
    asset_id: str
    asset_name: str | None
    cost: Decimal
    depreciation: Decimal
    status: AssetRecoveryStatus
    remarks: str | None
    recovered_by: uuid.UUID | None
    created_at: datetime
    updated_at: datetime


class AssetRecoveryListResponse(BaseModel):
    """Assets issued to the employee, ordered by asset id."""

    items: list[AssetRecoveryResponse]
    all_recovered: bool


class UpsertRecoverableDuePayload(BaseModel):
    """Request body for an amount owed by the employee."""

    amount: Money
    description: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=2000)


class RecoverableDueResponse(BaseModel):
    id: uuid.UUID
    exit_request_id: uuid.UUID
    due_type: str
    description: str | None
    amount: Decimal
    notes: str | None
    recorded_by: uuid.UUID
    created_at: datetime
    updated_at: datetime


class RecoverableDueListResponse(BaseModel):
    """Recorded dues, ordered by due type."""

    items: list[RecoverableDueResponse]
    total_amount: Decimal
