from __future__ import annotations

from pydantic import BaseModel


class ExitMetricsResponse(BaseModel):
    """Exit counts for a company."""

    total_exits: int
    open_exits: int
    by_status: dict[str, int]
    by_exit_type: dict[str, int]
