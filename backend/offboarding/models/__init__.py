from sqlmodel import SQLModel

from offboarding.models.activity import ExitActivityLog
from offboarding.models.base import TimestampMixin, UUIDBase
from offboarding.models.clearance import ClearanceItem
from offboarding.models.enums import (
    ActivityAction,
    AssetCondition,
    AssetRecoveryStatus,
    ClearanceStatus,
    DueType,
    ExitStatus,
    ExitType,
    SettlementStatus,
)
from offboarding.models.exit_request import ExitRequest
from offboarding.models.recovery import AssetRecovery, RecoverableDue
from offboarding.models.settlement import SettlementCalculation

__all__ = [
    "ActivityAction",
    "AssetCondition",
    "AssetRecovery",
    "AssetRecoveryStatus",
    "ClearanceItem",
    "ClearanceStatus",
    "DueType",
    "ExitActivityLog",
    "ExitRequest",
    "ExitStatus",
    "ExitType",
    "RecoverableDue",
    "SQLModel",
    "SettlementCalculation",
    "SettlementStatus",
    "TimestampMixin",
    "UUIDBase",
]
