from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from .model import ClockView
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy
from .strategies.scheduled_strategy import ScheduledStrategy
from .strategies.worked_strategy import WorkedStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the strategy by priority, first match wins."""

    def for_shift(self, *, clock: ClockView, now: datetime, grace_minutes: int) -> AttendanceStrategy:
        if clock.is_absent:
            return AbsentStrategy()
        if clock.clocked_in is not None and clock.clocked_out is not None:
            return WorkedStrategy()
        if clock.clocked_in is not None:
            return PresentStrategy()
        if clock.start is not None and clock.start + timedelta(minutes=grace_minutes) <= now:
            return LateStrategy()
        return ScheduledStrategy()
