from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import whole_minutes_between
from ...core.enums import AttendanceStatus
from ..model import ClockView
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Shift has started and nobody clocked in."""

    def decide(self, *, clock: ClockView, now: datetime) -> StatusDecision:
        minutes = whole_minutes_between(clock.start, now) if clock.start is not None else 0
        return StatusDecision(status=AttendanceStatus.LATE, minutes_late=max(minutes, 0))
