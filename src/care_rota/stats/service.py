from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..core.constants import SENSITIVE_LEAVE_LABEL
from ..shifts.model import ShiftRecord
from ..staff.model import StaffRecord
from .calculator.base import WorkingHoursCalculator
from .calculator.standard_calculator import StandardWorkingHoursCalculator
from .model import DailyStats, StaffOnLeaveItem


def round_hours(hours: float) -> float:
    return float(Decimal(str(hours)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class StatsAggregator:
    """Day-level counts and hours, computed over the same filtered shifts as the groups."""

    def __init__(self, *, calculator: Optional[WorkingHoursCalculator] = None):
        self._calculator = calculator or StandardWorkingHoursCalculator()

    def shift_hours(self, shift: ShiftRecord) -> float:
        return round_hours(self._calculator.working_hours(shift))

    def aggregate(
        self,
        shifts: Sequence[ShiftRecord],
        staff_roster: Sequence[StaffRecord],
        selected_date: date,
    ) -> DailyStats:
        total_hours = sum(self._calculator.working_hours(s) for s in shifts)

        return DailyStats(
            staff_count=len({s.staff_id for s in shifts if s.is_assigned}),
            total_hours=round_hours(total_hours),
            unassigned_count=sum(1 for s in shifts if not s.is_assigned),
            unpublished_count=sum(1 for s in shifts if not s.is_published),
            staff_on_leave_count=len({s.staff_id for s in staff_roster if s.is_on_leave(selected_date)}),
        )

    def staff_on_leave(self, staff_roster: Sequence[StaffRecord], selected_date: date) -> tuple[StaffOnLeaveItem, ...]:
        items: dict[str, StaffOnLeaveItem] = {}
        for staff in staff_roster:
            leave = staff.active_leave(selected_date)
            if leave is None or staff.staff_id in items:
                continue
            items[staff.staff_id] = StaffOnLeaveItem(
                staff_id=staff.staff_id,
                name=staff.name,
                job_title=staff.job_title or "",
                leave_type=SENSITIVE_LEAVE_LABEL if leave.sensitive else leave.leave_type,
                start=leave.start,
                end=leave.end,
                sensitive=leave.sensitive,
            )

        return tuple(sorted(items.values(), key=lambda item: (item.name, item.staff_id)))
