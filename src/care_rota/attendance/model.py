from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import parse_timestamp
from ..core.enums import AttendanceStatus, ShiftStatusCode
from ..shifts.model import ShiftRecord


@dataclass(frozen=True)
class ClockView:
    """Timing facts of a shift, normalised to aware datetimes or None."""

    start: Optional[datetime]
    end: Optional[datetime]
    clocked_in: Optional[datetime]
    clocked_out: Optional[datetime]
    is_absent: bool = False

    @property
    def effective_end(self) -> Optional[datetime]:
        if self.end is None:
            return None
        if self.start is not None and self.end < self.start:
            return self.end + timedelta(days=1)
        return self.end

    @classmethod
    def of(cls, shift: ShiftRecord) -> "ClockView":
        code = shift.absence_code if shift.absence_code is not None else shift.status_code
        return cls(
            start=parse_timestamp(shift.start),
            end=parse_timestamp(shift.end),
            clocked_in=parse_timestamp(shift.clocked_in),
            clocked_out=parse_timestamp(shift.clocked_out),
            is_absent=code == ShiftStatusCode.ABSENT,
        )


@dataclass(frozen=True)
class AttendanceDetails:
    """Read-model for the shift card: status plus the numbers around it."""

    status: AttendanceStatus
    clocked_in: Optional[datetime]
    clocked_out: Optional[datetime]
    start: Optional[datetime]
    effective_end: Optional[datetime]
    minutes_late: int
    minutes_early: int
    is_overnight: bool
    has_ended: bool
