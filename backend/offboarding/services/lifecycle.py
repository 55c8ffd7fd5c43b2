"""Exit request lifecycle rules.

Pure functions over ``ExitStatus``; no storage access. The request moves
strictly forward one stage at a time, or jumps to CANCELLED from any
non-terminal stage.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from offboarding.exceptions import InvalidTransitionError
from offboarding.models.enums import ExitStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

FORWARD_ORDER: tuple[ExitStatus, ...] = (
    ExitStatus.INITIATED,
    ExitStatus.MANAGER_APPROVED,
    ExitStatus.HR_APPROVED,
    ExitStatus.CLEARANCE_COMPLETED,
    ExitStatus.SETTLEMENT_COMPLETED,
    ExitStatus.COMPLETED,
)

TERMINAL_STATUSES: frozenset[ExitStatus] = frozenset({ExitStatus.COMPLETED, ExitStatus.CANCELLED})

# Which completion timestamp each status stamps. INITIATED is stamped by created_at.
STATUS_TIMESTAMP_FIELDS: Mapping[ExitStatus, str | None] = MappingProxyType(
    {
        ExitStatus.INITIATED: None,
        ExitStatus.MANAGER_APPROVED: "manager_approved_at",
        ExitStatus.HR_APPROVED: "hr_approved_at",
        ExitStatus.CLEARANCE_COMPLETED: "clearance_completed_at",
        ExitStatus.SETTLEMENT_COMPLETED: "settlement_completed_at",
        ExitStatus.COMPLETED: "completed_at",
        ExitStatus.CANCELLED: "cancelled_at",
    }
)

# Fail at import time if a status is added without a timestamp mapping.
if set(STATUS_TIMESTAMP_FIELDS) != set(ExitStatus):
    _missing = sorted(set(ExitStatus) - set(STATUS_TIMESTAMP_FIELDS))
    msg = f"STATUS_TIMESTAMP_FIELDS is missing entries for: {_missing}"
    raise RuntimeError(msg)


def is_terminal(status: ExitStatus) -> bool:
    """True for COMPLETED and CANCELLED."""
    return status in TERMINAL_STATUSES


def next_status(status: ExitStatus) -> ExitStatus | None:
    """The single forward successor of ``status``, or None at the end of the line."""
    if status not in FORWARD_ORDER:
        return None
    index = FORWARD_ORDER.index(status)
    if index + 1 >= len(FORWARD_ORDER):
        return None
    return FORWARD_ORDER[index + 1]


def allowed_targets(status: ExitStatus) -> frozenset[ExitStatus]:
    """Every status reachable from ``status`` in one transition."""
    if is_terminal(status):
        return frozenset()
    targets = {ExitStatus.CANCELLED}
    successor = next_status(status)
    if successor is not None:
        targets.add(successor)
    return frozenset(targets)


def validate_transition(current: ExitStatus, target: ExitStatus) -> None:
    """Raise InvalidTransitionError unless ``target`` is a legal successor of ``current``."""
    if target in allowed_targets(current):
        return
    if is_terminal(current):
        reason = f"'{current}' is a terminal status"
    elif target == current:
        reason = "the request is already in that status"
    elif target in FORWARD_ORDER and FORWARD_ORDER.index(target) < FORWARD_ORDER.index(current):
        reason = "exit requests cannot move backwards"
    else:
        reason = f"the next stage is '{next_status(current)}'"
    raise InvalidTransitionError(current, target, reason)


def timestamp_field_for(status: ExitStatus) -> str | None:
    """Name of the ExitRequest timestamp column that ``status`` stamps, if any."""
    return STATUS_TIMESTAMP_FIELDS[status]
