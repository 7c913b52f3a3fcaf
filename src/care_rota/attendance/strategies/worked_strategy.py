from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..model import ClockView
from .base import AttendanceStrategy, StatusDecision


class WorkedStrategy(AttendanceStrategy):
    """Clocked in and out: the shift is done."""

    def decide(self, *, clock: ClockView, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.WORKED)
