# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Discriminator, Tag, model_validator

from offboarding.models.enums import ActivityAction, ExitStatus, SettlementStatus

# ---------------------------------------------------------------------------
# Detail payloads (discriminated union on ``kind``)
# ---------------------------------------------------------------------------


class InitiatedDetails(BaseModel):
    """Recorded when an exit request is created."""

    kind: Literal["initiated"] = "initiated"
    exit_type: str
    resignation_date: date
    last_working_day: date
    reason: str | None = None


class TransitionDetails(BaseModel):
    """Recorded for an explicit status change."""

    kind: Literal["transition"] = "transition"
    from_status: ExitStatus
    to_status: ExitStatus
    note: str | None = None
    extra: dict[str, Any] = {}


class ClearanceDetails(BaseModel):
    """Recorded when a department signs off, and for the automatic clearance transition."""

    kind: Literal["clearance"] = "clearance"
    department: str
    status: str
    notes: str | None = None


class CancellationDetails(BaseModel):
    """Recorded when an exit request is cancelled."""

    kind: Literal["cancellation"] = "cancellation"
    from_status: ExitStatus
    reason: str | None = None
    extra: dict[str, Any] = {}


class SettlementCalculatedDetails(BaseModel):
    """Recorded for each stored settlement calculation."""

    kind: Literal["settlement"] = "settlement"
    calculation_id: uuid.UUID
    total_payable: Decimal
    total_recoverable: Decimal
    net_settlement: Decimal
    settlement_status: SettlementStatus


class AssetRecoveryDetails(BaseModel):
    """Recorded when an asset's recovery status is set."""

    kind: Literal["asset_recovery"] = "asset_recovery"
    asset_id: str
    asset_name: str | None = None
    status: str
    cost: Decimal


class RecoverableDueDetails(BaseModel):
    """Recorded when an amount owed by the employee is entered or revised."""

    kind: Literal["recoverable_due"] = "recoverable_due"
    due_type: str
    amount: Decimal
    description: str | None = None


class GenericDetails(BaseModel):
    """Fallback for payloads with no fixed shape.

    Stored payloads of a kind this version does not know keep their ``kind``;
    their other keys are gathered into ``data``.
    """

    kind: str = "generic"
    data: dict[str, Any] = {}

    @model_validator(mode="before")
    @classmethod
    def _collect_unknown_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        extra = {k: v for k, v in value.items() if k not in {"kind", "data"}}
        if not extra:
            return value
        data = dict(value.get("data") or {})
        data.update(extra)
        return {"kind": value.get("kind") or "generic", "data": data}


_KNOWN_KINDS = frozenset(
    {"initiated", "transition", "clearance", "cancellation", "settlement", "asset_recovery", "recoverable_due"}
)


def _details_discriminator(v: Any) -> str:
    """Discriminate by ``kind``; anything unrecognised is treated as generic."""
    kind = v.get("kind") if isinstance(v, dict) else getattr(v, "kind", None)
    if isinstance(v, GenericDetails) or kind not in _KNOWN_KINDS:
        return "generic"
    return kind


ActivityDetails = Annotated[
    Annotated[InitiatedDetails, Tag("initiated")]
    | Annotated[TransitionDetails, Tag("transition")]
    | Annotated[ClearanceDetails, Tag("clearance")]
    | Annotated[CancellationDetails, Tag("cancellation")]
    | Annotated[SettlementCalculatedDetails, Tag("settlement")]
    | Annotated[AssetRecoveryDetails, Tag("asset_recovery")]
    | Annotated[RecoverableDueDetails, Tag("recoverable_due")]
    | Annotated[GenericDetails, Tag("generic")],
    Discriminator(_details_discriminator),
]

# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ActivityLogEntryResponse(BaseModel):
    """A single activity log entry with its details decoded."""

    id: int
    exit_request_id: uuid.UUID
    actor_id: uuid.UUID
    action: ActivityAction
    details: ActivityDetails | None
    created_at: datetime


class ActivityLogListResponse(BaseModel):
    """Activity log for an exit request, oldest first."""

    items: list[ActivityLogEntryResponse]
    total: int
