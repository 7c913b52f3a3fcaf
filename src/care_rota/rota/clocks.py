from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import parse_timestamp
from ..common.logging import get_logger
from ..shifts.model import ShiftRecord
from .model import TimesheetClock

log = get_logger(__name__)


def _norm(guid: Optional[str]) -> str:
    return (guid or "").strip().lower()


def _earlier(candidate: TimesheetClock, existing: Optional[TimesheetClock]) -> bool:
    if existing is None:
        return True
    if not candidate.clocked_in:
        return False
    return not existing.clocked_in or candidate.clocked_in < existing.clocked_in


def merge_clock_data(shifts: Sequence[ShiftRecord], clocks: Sequence[TimesheetClock]) -> tuple[ShiftRecord, ...]:
    """Attach clock-in/out times to shifts.

    Match on the clock's shift lookup first, then on staff member + calendar
    date. Duplicates resolve to the earliest clock-in.
    """
    if not clocks:
        return tuple(shifts)

    by_shift: dict[str, TimesheetClock] = {}
    by_staff_date: dict[tuple[str, str], TimesheetClock] = {}

    for clock in clocks:
        shift_ref = _norm(clock.shift_id)
        if shift_ref and _earlier(clock, by_shift.get(shift_ref)):
            by_shift[shift_ref] = clock

        staff_ref = _norm(clock.staff_id)
        if staff_ref and clock.clocked_in:
            key = (staff_ref, clock.clocked_in[:10])
            if _earlier(clock, by_staff_date.get(key)):
                by_staff_date[key] = clock

    merged: list[ShiftRecord] = []
    matched = 0
    for shift in shifts:
        clock = by_shift.get(_norm(shift.shift_id))
        if clock is None and shift.staff_id and shift.effective_date is not None:
            clock = by_staff_date.get((_norm(shift.staff_id), shift.effective_date.isoformat()))

        if clock is None:
            merged.append(shift)
            continue

        matched += 1
        merged.append(
            replace(
                shift,
                clocked_in=parse_timestamp(clock.clocked_in),
                clocked_out=parse_timestamp(clock.clocked_out),
            )
        )

    log.debug("clocks.merged", matched=matched, unmatched=len(merged) - matched)
    return tuple(merged)
