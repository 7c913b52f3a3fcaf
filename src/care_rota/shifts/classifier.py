from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Optional

from ..common.datetime_utils import as_aware
from ..core.constants import MISSING_START_HOUR, NIGHT_END_HOUR, NIGHT_START_HOUR
from ..core.enums import ShiftType
from .model import ShiftRecord


@dataclass(frozen=True)
class ShiftTypeClassifier:
    """Day / night / sleep-in from the sleep-in flag and the local start hour."""

    tz: Optional[tzinfo] = None

    def start_hour(self, shift: ShiftRecord) -> int:
        if shift.start is None:
            return MISSING_START_HOUR
        start = as_aware(shift.start)
        if self.tz is not None:
            start = start.astimezone(self.tz)
        return start.hour

    def classify(self, shift: ShiftRecord) -> ShiftType:
        if shift.sleep_in:
            return ShiftType.SLEEP_IN

        hour = self.start_hour(shift)
        if hour >= NIGHT_START_HOUR or hour < NIGHT_END_HOUR:
            return ShiftType.NIGHT
        return ShiftType.DAY
