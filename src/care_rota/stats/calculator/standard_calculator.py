from __future__ import annotations

from datetime import timedelta

from ...common.datetime_utils import parse_timestamp
from ...shifts.model import ShiftRecord
from .base import WorkingHoursCalculator


class StandardWorkingHoursCalculator(WorkingHoursCalculator):
    """Standard rule: (end - start, +24h when overnight) - break, not below 0."""

    def working_hours(self, shift: ShiftRecord) -> float:
        start = parse_timestamp(shift.start)
        end = parse_timestamp(shift.end)
        if start is None or end is None:
            return 0.0

        duration = end - start
        if duration < timedelta(0):
            duration += timedelta(hours=24)

        hours = duration.total_seconds() / 3600 - max(int(shift.break_minutes or 0), 0) / 60
        return max(hours, 0.0)
