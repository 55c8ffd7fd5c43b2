from __future__ import annotations

import enum


class ExitStatus(enum.StrEnum):
    """Lifecycle of an exit request. Declaration order is the forward order."""

    INITIATED = "initiated"
    MANAGER_APPROVED = "manager_approved"
    HR_APPROVED = "hr_approved"
    CLEARANCE_COMPLETED = "clearance_completed"
    SETTLEMENT_COMPLETED = "settlement_completed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ExitType(enum.StrEnum):
    """Why the employee is leaving."""

    RESIGNATION = "resignation"
    TERMINATION = "termination"
    ABSCONDED = "absconded"
    CONTRACT_END = "contract_end"


class ClearanceStatus(enum.StrEnum):
    """Sign-off state of a single department's clearance item."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SettlementStatus(enum.StrEnum):
    """Direction of the final settlement, derived from the sign of the net amount."""

    COMPANY_PAYS_EMPLOYEE = "company_pays_employee"
    EMPLOYEE_PAYS_COMPANY = "employee_pays_company"
    FULLY_SETTLED = "fully_settled"


class AssetCondition(enum.StrEnum):
    """Condition an asset came back in (or did not)."""

    RETURNED = "returned"
    GOOD = "good"
    DAMAGED = "damaged"
    LOST = "lost"


class AssetRecoveryStatus(enum.StrEnum):
    """Recovery state of an asset issued to a departing employee."""

    PENDING = "pending"
    RETURNED = "returned"
    GOOD = "good"
    DAMAGED = "damaged"
    LOST = "lost"


class DueType(enum.StrEnum):
    """Dues with their own settlement line. Any other due type is a pending recovery."""

    LOAN = "loan"
    ADVANCE = "advance"


class ActivityAction(enum.StrEnum):
    """Action recorded in an exit request's activity log."""

    INITIATED = "initiated"
    MANAGER_APPROVED = "manager_approved"
    HR_APPROVED = "hr_approved"
    CLEARANCE_COMPLETED = "clearance_completed"
    SETTLEMENT_COMPLETED = "settlement_completed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    CLEARANCE_UPDATED = "clearance_updated"
    SETTLEMENT_CALCULATED = "settlement_calculated"
    ASSET_RECOVERY_UPDATED = "asset_recovery_updated"
    DUE_RECORDED = "due_recorded"
    DELETED = "deleted"
