# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

# Roles allowed to drive HR stages (approval, settlement, completion, deletion).
HR_ROLES = frozenset({"hr", "admin"})
# Roles allowed to sign off a department clearance.
CLEARANCE_ROLES = frozenset({"approver", "manager", "hr", "admin"})


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    company_id: uuid.UUID
    user_id: uuid.UUID
    role: str = "employee"

    @property
    def is_hr(self) -> bool:
        return self.role in HR_ROLES
