from datetime import datetime, timezone

from care_rota.attendance.factory import AttendanceStrategyFactory
from care_rota.attendance.model import ClockView
from care_rota.attendance.strategies.absent_strategy import AbsentStrategy
from care_rota.attendance.strategies.late_strategy import LateStrategy
from care_rota.attendance.strategies.present_strategy import PresentStrategy
from care_rota.attendance.strategies.scheduled_strategy import ScheduledStrategy
from care_rota.attendance.strategies.worked_strategy import WorkedStrategy

START = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)
END = datetime(2025, 1, 1, 16, 0, tzinfo=timezone.utc)


def _clock(**overrides) -> ClockView:
    values = dict(start=START, end=END, clocked_in=None, clocked_out=None, is_absent=False)
    values.update(overrides)
    return ClockView(**values)


def test_factory_scheduled_within_grace():
    now = datetime(2025, 1, 1, 8, 4, 59, tzinfo=timezone.utc)
    strategy = AttendanceStrategyFactory().for_shift(clock=_clock(), now=now, grace_minutes=5)

    assert isinstance(strategy, ScheduledStrategy)


def test_factory_late_after_grace():
    now = datetime(2025, 1, 1, 8, 6, 0, tzinfo=timezone.utc)
    strategy = AttendanceStrategyFactory().for_shift(clock=_clock(), now=now, grace_minutes=5)

    assert isinstance(strategy, LateStrategy)


def test_factory_priority_order():
    factory = AttendanceStrategyFactory()
    now = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    absent = _clock(is_absent=True, clocked_in=START, clocked_out=END)
    worked = _clock(clocked_in=START, clocked_out=END)
    present = _clock(clocked_in=START)

    assert isinstance(factory.for_shift(clock=absent, now=now, grace_minutes=0), AbsentStrategy)
    assert isinstance(factory.for_shift(clock=worked, now=now, grace_minutes=0), WorkedStrategy)
    assert isinstance(factory.for_shift(clock=present, now=now, grace_minutes=0), PresentStrategy)
