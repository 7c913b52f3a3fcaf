from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class DailyStats:
    staff_count: int
    total_hours: float
    unassigned_count: int
    unpublished_count: int
    staff_on_leave_count: int


@dataclass(frozen=True)
class StaffOnLeaveItem:
    """Read-model for the 'staff on leave' list."""

    staff_id: str
    name: str
    job_title: str
    leave_type: str
    start: Optional[date]
    end: Optional[date]
    sensitive: bool
