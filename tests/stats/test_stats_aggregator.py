from datetime import date, datetime, timezone

from care_rota.core.enums import ShiftStatusCode
from care_rota.shifts.model import ShiftRecord
from care_rota.staff.model import LeaveInterval, StaffRecord
from care_rota.stats.service import StatsAggregator, round_hours

DAY = date(2026, 2, 10)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 2, 10, hour, minute, tzinfo=timezone.utc)


def test_round_hours_half_up():
    assert round_hours(7.25) == 7.3
    assert round_hours(7.35) == 7.4
    assert round_hours(0) == 0.0


def test_aggregate_counts():
    shifts = [
        ShiftRecord(shift_id="1", staff_id="a", start=_at(8), end=_at(16), status_code=int(ShiftStatusCode.PUBLISHED)),
        ShiftRecord(shift_id="2", staff_id="a", start=_at(17), end=_at(20, 20)),
        ShiftRecord(shift_id="3", start=_at(9), end=_at(10)),
    ]
    stats = StatsAggregator().aggregate(shifts, [], DAY)

    assert stats.staff_count == 1
    assert stats.unassigned_count == 1
    assert stats.unpublished_count == 2
    assert stats.total_hours == 12.3
    assert stats.staff_on_leave_count == 0


def test_empty_day():
    stats = StatsAggregator().aggregate([], [], DAY)

    assert stats.staff_count == 0
    assert stats.total_hours == 0.0


def test_staff_on_leave_is_inclusive_and_sorted():
    roster = [
        StaffRecord(staff_id="b", name="Zoe", leave=(LeaveInterval(start=DAY, end=DAY, leave_type="Annual Leave"),)),
        StaffRecord(staff_id="a", name="Adam", leave=(LeaveInterval(start=date(2026, 2, 1), end=DAY, sensitive=True),)),
        StaffRecord(staff_id="c", name="Cal", leave=(LeaveInterval(start=date(2026, 2, 11), end=date(2026, 2, 12)),)),
        StaffRecord(staff_id="d", name="Dee", leave=(LeaveInterval(start=None, end=DAY),)),
    ]
    aggregator = StatsAggregator()

    items = aggregator.staff_on_leave(roster, DAY)
    assert [i.name for i in items] == ["Adam", "Zoe"]
    assert [i.leave_type for i in items] == ["Sensitive Leave", "Annual Leave"]
    assert aggregator.aggregate([], roster, DAY).staff_on_leave_count == 2


def test_staff_from_view_row_with_leave():
    staff = StaffRecord.from_view_row(
        {
            "Staff Member ID": "s1",
            "Staff Member Name": "Amy Pond",
            "Job Title Name": "Nurse",
            "Date of Birth": "1990-05-01T00:00:00Z",
            "Leave": [
                {"Start Date": "2026-02-09", "End Date": "2026-02-10", "Leave Type": "Sick"},
                "not a row",
            ],
        }
    )

    assert staff.date_of_birth == date(1990, 5, 1)
    assert len(staff.leave) == 1
    assert staff.active_leave(DAY).leave_type == "Sick"
    assert not staff.is_on_leave(date(2026, 2, 11))
