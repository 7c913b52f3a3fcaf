from datetime import datetime, timezone

from care_rota.daily.filters import Filters, ShiftFilterPipeline
from care_rota.shifts.model import ShiftRecord


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 2, 10, hour, minute, tzinfo=timezone.utc)


SHIFTS = (
    ShiftRecord(shift_id="1", staff_id="a", staff_name="Amy Pond", start=_at(9), end=_at(17)),
    ShiftRecord(shift_id="2", staff_id="b", staff_name="Rory Williams", start=_at(9), end=_at(17), clocked_in=_at(8, 55)),
    ShiftRecord(shift_id="3", staff_id="c", staff_name="Clara Oswald", start=_at(21), end=_at(7)),
    ShiftRecord(shift_id="4", start=_at(9), end=_at(17)),
    ShiftRecord(shift_id="5", staff_id="d", staff_name="Donna Noble", start=_at(22), end=_at(8), sleep_in=True),
)


def _ids(shifts) -> list[str]:
    return [s.shift_id for s in shifts]


def test_search_is_case_insensitive_and_drops_unassigned():
    result = ShiftFilterPipeline().filter(SHIFTS, Filters(search="  aMy "), _at(10))
    assert _ids(result) == ["1"]


def test_status_filter_uses_reference_time():
    pipeline = ShiftFilterPipeline()

    assert _ids(pipeline.filter(SHIFTS, Filters(status="late"), _at(10))) == ["1", "4"]
    assert _ids(pipeline.filter(SHIFTS, Filters(status="present"), _at(10))) == ["2"]
    assert _ids(pipeline.filter(SHIFTS, Filters(status="scheduled"), _at(10))) == ["3", "5"]


def test_shift_type_filter():
    pipeline = ShiftFilterPipeline()

    assert _ids(pipeline.filter(SHIFTS, Filters(shift_type="night"), _at(10))) == ["3"]
    assert _ids(pipeline.filter(SHIFTS, Filters(shift_type="sleepin"), _at(10))) == ["5"]


def test_filters_combine_and_preserve_order():
    filters = Filters(search="o", status="scheduled", shift_type="night")
    assert _ids(ShiftFilterPipeline().filter(SHIFTS, filters, _at(10))) == ["3"]


def test_unknown_selectors_fail_open():
    filters = Filters(status="on-holiday", shift_type="twilight")
    assert _ids(ShiftFilterPipeline().filter(SHIFTS, filters, _at(10))) == _ids(SHIFTS)


def test_department_selector_is_not_applied():
    filters = Filters(department="Nursing")
    assert len(ShiftFilterPipeline().filter(SHIFTS, filters, _at(10))) == len(SHIFTS)


def test_filtering_is_idempotent():
    pipeline = ShiftFilterPipeline()
    filters = Filters(search="a", status="late")

    once = pipeline.filter(SHIFTS, filters, _at(10))
    assert pipeline.filter(once, filters, _at(10)) == once


def test_filters_from_mapping_defaults_and_normalises():
    filters = Filters.from_mapping({"search": " amy ", "status": "LATE", "shift_type": ""})
    assert filters == Filters(search="amy", department="all", status="late", shift_type="all")
