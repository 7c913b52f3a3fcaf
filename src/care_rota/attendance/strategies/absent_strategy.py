from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..model import ClockView
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Shift explicitly marked absent; wins over any clock data."""

    def decide(self, *, clock: ClockView, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
