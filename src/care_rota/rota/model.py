from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..shifts.model import ShiftRecord
from ..staff.model import StaffRecord


@dataclass(frozen=True)
class RotaWindow:
    """Snapshot returned by the data provider: a multi-day slice of one rota."""

    shifts: tuple[ShiftRecord, ...] = ()
    staff: tuple[StaffRecord, ...] = ()
    start_date: Optional[date] = None
    window_days: int = 0


@dataclass(frozen=True)
class TimesheetClock:
    """One clock-in/out submission from the timesheet table."""

    clock_id: str
    staff_id: Optional[str]
    shift_id: Optional[str]
    clocked_in: Optional[str]
    clocked_out: Optional[str]
