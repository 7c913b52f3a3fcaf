import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from care_rota.core.exceptions import DataFetchError
from care_rota.refresh.coordinator import LiveRefreshCoordinator
from care_rota.refresh.visibility import VisibilitySignal


class FakeTimer:
    def __init__(self, interval: float, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    def __init__(self):
        self.timers: list[FakeTimer] = []

    def call_every(self, interval: float, callback) -> FakeTimer:
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    def active(self, interval: float) -> list[FakeTimer]:
        return [t for t in self.timers if t.interval == interval and not t.cancelled]

    def fire(self, interval: float) -> None:
        for timer in self.active(interval):
            timer.callback()


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 2, 10, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class CountingFetch:
    def __init__(self):
        self.calls = 0
        self.fail = False
        self.gate: Optional[asyncio.Event] = None

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise DataFetchError("dataverse unavailable")
        return {"snapshot": self.calls}


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


def _coordinator(fetch, *, visible: bool = True, auto: bool = True):
    scheduler = FakeScheduler()
    visibility = VisibilitySignal(visible=visible)
    clock = FakeClock()
    coordinator = LiveRefreshCoordinator(
        fetch,
        scheduler=scheduler,
        visibility=visibility,
        clock=clock,
        auto_refresh_enabled=auto,
    )
    return coordinator, scheduler, visibility, clock


async def test_text_is_never_before_first_refresh():
    coordinator, _, _, _ = _coordinator(CountingFetch())
    coordinator.start()

    assert coordinator.last_updated_text == "Never"
    assert coordinator.is_stale is True
    coordinator.stop()


async def test_manual_refresh_updates_data_and_text():
    fetch = CountingFetch()
    coordinator, scheduler, _, clock = _coordinator(fetch)
    coordinator.start()

    data = await coordinator.refresh()

    assert data == {"snapshot": 1}
    assert coordinator.data == {"snapshot": 1}
    assert coordinator.last_updated_text == "less than a minute ago"

    clock.advance(minutes=5)
    scheduler.fire(30)
    assert coordinator.last_updated_text == "5 minutes ago"

    clock.advance(hours=2)
    scheduler.fire(30)
    assert coordinator.last_updated_text == "about 2 hours ago"
    assert coordinator.is_stale is True
    coordinator.stop()


async def test_poll_timer_follows_auto_and_visibility():
    coordinator, scheduler, visibility, _ = _coordinator(CountingFetch())
    coordinator.start()
    assert len(scheduler.active(60)) == 1

    coordinator.set_auto_refresh_enabled(False)
    assert scheduler.active(60) == []

    coordinator.set_auto_refresh_enabled(True)
    assert len(scheduler.active(60)) == 1

    visibility.set_visible(False)
    assert scheduler.active(60) == []
    assert coordinator.is_page_visible is False

    # the text ticker keeps running while hidden
    assert len(scheduler.active(30)) == 1
    coordinator.stop()


async def test_hidden_page_never_polls():
    fetch = CountingFetch()
    coordinator, scheduler, _, _ = _coordinator(fetch, visible=False)
    coordinator.start()

    scheduler.fire(60)
    await _settle()

    assert scheduler.active(60) == []
    assert fetch.calls == 0
    coordinator.stop()


async def test_poll_tick_fetches_in_background():
    fetch = CountingFetch()
    coordinator, scheduler, _, _ = _coordinator(fetch)
    coordinator.start()

    scheduler.fire(60)
    await _settle()

    assert fetch.calls == 1
    assert coordinator.data == {"snapshot": 1}
    coordinator.stop()


async def test_becoming_visible_refetches_once():
    fetch = CountingFetch()
    coordinator, scheduler, visibility, _ = _coordinator(fetch, visible=False)
    coordinator.start()

    visibility.set_visible(True)
    await _settle()

    assert fetch.calls == 1
    assert len(scheduler.active(60)) == 1
    coordinator.stop()


async def test_becoming_visible_with_auto_off_does_not_fetch():
    fetch = CountingFetch()
    coordinator, scheduler, visibility, _ = _coordinator(fetch, visible=False, auto=False)
    coordinator.start()

    visibility.set_visible(True)
    await _settle()

    assert fetch.calls == 0
    assert scheduler.active(60) == []
    coordinator.stop()


async def test_triggers_during_fetch_join_the_in_flight_request():
    fetch = CountingFetch()
    fetch.gate = asyncio.Event()
    coordinator, scheduler, visibility, _ = _coordinator(fetch)
    coordinator.start()

    first = asyncio.ensure_future(coordinator.refresh())
    await _settle()
    assert coordinator.is_refreshing is True

    scheduler.fire(60)
    visibility.set_visible(False)
    visibility.set_visible(True)
    second = asyncio.ensure_future(coordinator.refresh())
    await _settle()

    fetch.gate.set()
    results = await asyncio.gather(first, second)

    assert fetch.calls == 1
    assert results == [{"snapshot": 1}, {"snapshot": 1}]
    assert coordinator.is_refreshing is False
    coordinator.stop()


async def test_failed_refresh_keeps_previous_data():
    fetch = CountingFetch()
    coordinator, scheduler, _, clock = _coordinator(fetch)
    coordinator.start()
    await coordinator.refresh()

    fetch.fail = True
    clock.advance(minutes=3)
    with pytest.raises(DataFetchError):
        await coordinator.refresh()

    assert coordinator.data == {"snapshot": 1}
    assert isinstance(coordinator.last_error, DataFetchError)
    assert coordinator.last_updated_text == "3 minutes ago"

    # background failures are recorded, not raised
    scheduler.fire(60)
    await _settle()
    assert fetch.calls == 3
    assert coordinator.is_refreshing is False

    fetch.fail = False
    await coordinator.refresh()
    assert coordinator.last_error is None
    coordinator.stop()


async def test_stop_cancels_timers_and_unsubscribes():
    fetch = CountingFetch()
    coordinator, scheduler, visibility, _ = _coordinator(fetch)
    coordinator.start()
    coordinator.stop()

    assert all(t.cancelled for t in scheduler.timers)
    assert visibility.listener_count == 0

    visibility.set_visible(False)
    visibility.set_visible(True)
    await _settle()
    assert fetch.calls == 0


async def test_coordinators_do_not_share_state():
    first, first_scheduler, _, _ = _coordinator(CountingFetch())
    second, second_scheduler, _, _ = _coordinator(CountingFetch())
    first.start()
    second.start()

    first.set_auto_refresh_enabled(False)

    assert second.is_auto_refresh_enabled is True
    assert len(second_scheduler.active(60)) == 1
    assert first_scheduler.active(60) == []
    first.stop()
    second.stop()


async def test_manual_refresh_ignores_toggle_and_visibility():
    fetch = CountingFetch()
    coordinator, scheduler, _, _ = _coordinator(fetch, visible=False, auto=False)
    coordinator.start()

    data = await coordinator.refresh()

    assert fetch.calls == 1
    assert data == {"snapshot": 1}
    assert coordinator.data == {"snapshot": 1}
    assert coordinator.last_updated_text == "less than a minute ago"
    assert scheduler.active(60) == []
    coordinator.stop()
