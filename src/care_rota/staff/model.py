from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_day
from ..core.constants import DEFAULT_LEAVE_LABEL


@dataclass(frozen=True)
class LeaveInterval:
    start: Optional[date]
    end: Optional[date]
    sensitive: bool = False
    leave_type: str = DEFAULT_LEAVE_LABEL

    def covers(self, day: date) -> bool:
        """Inclusive, date-only containment. Open-ended intervals never match."""
        if self.start is None or self.end is None:
            return False
        return self.start <= day <= self.end

    @classmethod
    def from_view_row(cls, row: Mapping[str, Any]) -> "LeaveInterval":
        return cls(
            start=parse_day(row.get("Start Date")),
            end=parse_day(row.get("End Date")),
            sensitive=bool(row.get("Sensitive")),
            leave_type=str(row.get("Leave Type") or DEFAULT_LEAVE_LABEL),
        )


@dataclass(frozen=True)
class StaffRecord:
    """Domain entity: roster entry for a staff member on the rota."""

    staff_id: str
    name: str
    job_title: Optional[str] = None
    date_of_birth: Optional[date] = None
    leave: tuple[LeaveInterval, ...] = ()

    def active_leave(self, day: date) -> Optional[LeaveInterval]:
        return next((interval for interval in self.leave if interval.covers(day)), None)

    def is_on_leave(self, day: date) -> bool:
        return self.active_leave(day) is not None

    @classmethod
    def from_view_row(cls, row: Mapping[str, Any]) -> "StaffRecord":
        leave_rows = row.get("Leave") or ()
        return cls(
            staff_id=str(row.get("Staff Member ID") or ""),
            name=str(row.get("Staff Member Name") or ""),
            job_title=row.get("Job Title Name") or None,
            date_of_birth=parse_day(row.get("Date of Birth")),
            leave=tuple(LeaveInterval.from_view_row(r) for r in leave_rows if isinstance(r, Mapping)),
        )
