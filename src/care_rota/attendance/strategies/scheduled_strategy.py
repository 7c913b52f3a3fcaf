from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..model import ClockView
from .base import AttendanceStrategy, StatusDecision


class ScheduledStrategy(AttendanceStrategy):
    """Not started yet, or nothing to go on."""

    def decide(self, *, clock: ClockView, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.SCHEDULED)
