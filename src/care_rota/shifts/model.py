from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_day, parse_timestamp
from ..core.enums import ShiftStatusCode


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _int(value: Any, default: Optional[int]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _flag(value: Any) -> bool:
    return value is True or value == 1


@dataclass(frozen=True)
class ShiftRecord:
    """Domain entity: one scheduled work period on the rota.

    `end` earlier than `start` marks an overnight shift spanning midnight.
    """

    shift_id: str
    staff_id: Optional[str] = None
    staff_name: str = ""
    job_title: Optional[str] = None
    department: Optional[str] = None
    teams: tuple[str, ...] = ()
    shift_date: Optional[date] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    break_minutes: int = 0
    sleep_in: bool = False
    overtime: bool = False
    shift_leader: bool = False
    act_up: bool = False
    is_external_staff: bool = False
    is_agency_staff: bool = False
    status_code: int = ShiftStatusCode.UNPUBLISHED
    clocked_in: Optional[datetime] = None
    clocked_out: Optional[datetime] = None
    absence_code: Optional[int] = None
    shift_name: str = ""
    rota_id: Optional[str] = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.staff_id)

    @property
    def is_published(self) -> bool:
        return self.status_code == ShiftStatusCode.PUBLISHED

    @property
    def is_overnight(self) -> bool:
        return self.start is not None and self.end is not None and self.end < self.start

    @property
    def effective_date(self) -> Optional[date]:
        if self.shift_date is not None:
            return self.shift_date
        return self.start.date() if self.start is not None else None

    @classmethod
    def from_view_row(cls, row: Mapping[str, Any]) -> "ShiftRecord":
        """Build a record from a loose view row; never raises on bad values."""
        teams = row.get("Staff Teams") or ()
        if isinstance(teams, str):
            teams = (teams,)
        elif not isinstance(teams, (list, tuple)):
            teams = ()

        return cls(
            shift_id=_text(row.get("Shift ID")) or "",
            staff_id=_text(row.get("Staff Member ID")),
            staff_name=_text(row.get("Staff Member Name")) or "",
            job_title=_text(row.get("Job Title")),
            department=_text(row.get("Department")),
            teams=tuple(t for t in (_text(x) for x in teams) if t),
            shift_date=parse_day(row.get("Shift Date")),
            start=parse_timestamp(row.get("Shift Start Time")),
            end=parse_timestamp(row.get("Shift End Time")),
            break_minutes=max(_int(row.get("Shift Break Duration"), 0) or 0, 0),
            sleep_in=_flag(row.get("Sleep In")),
            overtime=_flag(row.get("Overtime Shift")),
            shift_leader=_flag(row.get("Shift Leader")),
            act_up=_flag(row.get("Act Up")),
            is_external_staff=_flag(row.get("Is External Staff")),
            is_agency_staff=_flag(row.get("Is Agency")),
            status_code=_int(row.get("Shift Status"), 0) or 0,
            clocked_in=parse_timestamp(row.get("Clocked In")),
            clocked_out=parse_timestamp(row.get("Clocked Out")),
            absence_code=_int(row.get("Shift Status Code"), None),
            shift_name=_text(row.get("Shift Name")) or "",
            rota_id=_text(row.get("Rota ID")),
        )
