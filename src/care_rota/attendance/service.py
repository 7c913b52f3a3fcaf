from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import as_aware, now_utc
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import AttendanceStatus
from ..shifts.model import ShiftRecord
from .factory import AttendanceStrategyFactory
from .model import AttendanceDetails, ClockView
from .strategies.base import StatusDecision


class AttendanceClassifier:
    """Derives the attendance status of a shift at a reference instant.

    Pure: the same shift and reference time always give the same answer, and
    malformed timestamps degrade to "unknown" instead of raising.
    """

    def __init__(
        self,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._grace_minutes = max(int(grace_minutes), 0)
        self._clock = clock

    def resolve_reference(self, reference_time: Optional[datetime]) -> datetime:
        return as_aware(reference_time if reference_time is not None else self._clock())

    def decide(self, shift: ShiftRecord, reference_time: Optional[datetime] = None) -> StatusDecision:
        now = self.resolve_reference(reference_time)
        clock = ClockView.of(shift)
        strategy = self._factory.for_shift(clock=clock, now=now, grace_minutes=self._grace_minutes)
        return strategy.decide(clock=clock, now=now)

    def classify(self, shift: ShiftRecord, reference_time: Optional[datetime] = None) -> AttendanceStatus:
        return self.decide(shift, reference_time).status

    def minutes_late(self, shift: ShiftRecord, reference_time: Optional[datetime] = None) -> int:
        return self.decide(shift, reference_time).minutes_late

    def details(self, shift: ShiftRecord, reference_time: Optional[datetime] = None) -> AttendanceDetails:
        now = self.resolve_reference(reference_time)
        clock = ClockView.of(shift)
        decision = self.decide(shift, now)
        effective_end = clock.effective_end

        return AttendanceDetails(
            status=decision.status,
            clocked_in=clock.clocked_in,
            clocked_out=clock.clocked_out,
            start=clock.start,
            effective_end=effective_end,
            minutes_late=decision.minutes_late,
            minutes_early=decision.minutes_early,
            is_overnight=clock.start is not None and clock.end is not None and clock.end < clock.start,
            has_ended=effective_end is not None and effective_end <= now,
        )

    def count_by_status(
        self, shifts: Iterable[ShiftRecord], reference_time: Optional[datetime] = None
    ) -> dict[AttendanceStatus, int]:
        now = self.resolve_reference(reference_time)
        counts = {status: 0 for status in AttendanceStatus}
        for shift in shifts:
            counts[self.classify(shift, now)] += 1
        return counts
