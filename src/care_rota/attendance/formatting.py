from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional

from ..core.enums import AttendanceStatus

_LABELS = {
    AttendanceStatus.PRESENT: "Present",
    AttendanceStatus.SCHEDULED: "Scheduled",
    AttendanceStatus.WORKED: "Worked",
    AttendanceStatus.ABSENT: "Absent",
    AttendanceStatus.LATE: "Late",
}


def status_label(status: AttendanceStatus) -> str:
    return _LABELS.get(status, status.value.title())


def _hours_and_minutes(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h" if mins == 0 else f"{hours}h {mins}m"


def format_late_by(minutes: int) -> str:
    """'' / '5 min' / '2h' / '1h 15m'."""
    if minutes < 1:
        return ""
    return _hours_and_minutes(minutes)


def format_early_by(minutes: int) -> str:
    if minutes < 1:
        return ""
    return f"{_hours_and_minutes(minutes)} early"


def format_clock_time(value: Optional[datetime], tz: Optional[tzinfo] = None) -> str:
    if value is None:
        return "--:--"
    if tz is not None:
        value = value.astimezone(tz)
    return value.strftime("%H:%M")
