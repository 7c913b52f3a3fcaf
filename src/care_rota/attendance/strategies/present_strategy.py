from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import whole_minutes_between
from ...core.enums import AttendanceStatus
from ..model import ClockView
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Clocked in, not yet out. Late/early arrival is measured against the start."""

    def decide(self, *, clock: ClockView, now: datetime) -> StatusDecision:
        if clock.start is None or clock.clocked_in is None:
            return StatusDecision(status=AttendanceStatus.PRESENT)

        offset = whole_minutes_between(clock.start, clock.clocked_in)
        return StatusDecision(
            status=AttendanceStatus.PRESENT,
            minutes_late=max(offset, 0),
            minutes_early=max(-offset, 0),
        )
