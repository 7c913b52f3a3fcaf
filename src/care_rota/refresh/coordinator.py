"""Live refresh of the daily rota.

The coordinator owns every timer and subscription it creates, so two
coordinators never share state and stop() leaves nothing behind.

Gating:
    poll timer   runs while started, auto-refresh is on and the page is visible
    text ticker  runs while started
    visibility   hidden -> visible with auto-refresh on triggers one refetch
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional

from ..common.datetime_utils import format_time_ago, now_utc
from ..common.logging import get_logger
from ..core.constants import (
    DEFAULT_REFRESH_INTERVAL_SECONDS,
    DEFAULT_STALE_AFTER_SECONDS,
    DEFAULT_TEXT_INTERVAL_SECONDS,
    NEVER_UPDATED_TEXT,
)
from .scheduler import PeriodicTask, Scheduler
from .visibility import VisibilitySource

log = get_logger(__name__)

Fetch = Callable[[], Awaitable[Any]]


@dataclass
class RefreshState:
    auto_refresh_enabled: bool = True
    page_visible: bool = True
    last_updated: Optional[datetime] = None
    last_updated_text: str = NEVER_UPDATED_TEXT
    is_refreshing: bool = False
    last_error: Optional[Exception] = None


class LiveRefreshCoordinator:
    def __init__(
        self,
        fetch: Fetch,
        *,
        scheduler: Scheduler,
        visibility: VisibilitySource,
        clock: Callable[[], datetime] = now_utc,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
        text_interval: float = DEFAULT_TEXT_INTERVAL_SECONDS,
        auto_refresh_enabled: bool = True,
        stale_after: float = DEFAULT_STALE_AFTER_SECONDS,
    ):
        self._fetch = fetch
        self._scheduler = scheduler
        self._visibility = visibility
        self._clock = clock
        self._refresh_interval = float(refresh_interval)
        self._text_interval = float(text_interval)
        self._stale_after = timedelta(seconds=stale_after)

        self.state = RefreshState(
            auto_refresh_enabled=bool(auto_refresh_enabled),
            page_visible=visibility.is_visible(),
        )

        self._active = False
        self._data: Any = None
        self._poll_timer: Optional[PeriodicTask] = None
        self._text_timer: Optional[PeriodicTask] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._in_flight: Optional[asyncio.Task] = None

    # lifecycle

    def start(self) -> None:
        """Begin live updates. The first load is a normal `await refresh()`."""
        if self._active:
            return
        self._active = True
        self.state.page_visible = self._visibility.is_visible()
        self._unsubscribe = self._visibility.subscribe(self._on_visibility_change)
        self._text_timer = self._scheduler.call_every(self._text_interval, self._update_text)
        self._sync_poll_timer()
        self._update_text()
        log.debug("refresh.started", auto=self.state.auto_refresh_enabled, visible=self.state.page_visible)

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._sync_poll_timer()
        if self._text_timer is not None:
            self._text_timer.cancel()
            self._text_timer = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        log.debug("refresh.stopped")

    def set_auto_refresh_enabled(self, enabled: bool) -> None:
        self.state.auto_refresh_enabled = bool(enabled)
        self._sync_poll_timer()

    # fetching

    async def refresh(self) -> Any:
        """Manual refresh. Joins a fetch already in flight; errors are re-raised."""
        task = self._ensure_in_flight()
        return await asyncio.shield(task)

    def _trigger(self, reason: str) -> None:
        if not self._active:
            return
        log.debug("refresh.triggered", reason=reason, joined=self.is_refreshing)
        self._ensure_in_flight()

    def _ensure_in_flight(self) -> asyncio.Task:
        if self._in_flight is not None and not self._in_flight.done():
            return self._in_flight
        task = asyncio.get_running_loop().create_task(self._run_fetch())
        task.add_done_callback(self._on_fetch_done)
        self._in_flight = task
        return task

    async def _run_fetch(self) -> Any:
        self.state.is_refreshing = True
        try:
            data = await self._fetch()
        except Exception as e:
            self.state.last_error = e
            log.warning("refresh.failed", error=str(e), error_type=type(e).__name__)
            raise
        finally:
            self.state.is_refreshing = False
            self._update_text()

        self._data = data
        self.state.last_error = None
        self.state.last_updated = self._clock()
        self._update_text()
        log.info("refresh.completed", last_updated=self.state.last_updated.isoformat())
        return data

    def _on_fetch_done(self, task: asyncio.Task) -> None:
        if self._in_flight is task:
            self._in_flight = None
        # background triggers have no awaiter; the error is already in state
        if not task.cancelled():
            task.exception()

    # timers and signals

    def _sync_poll_timer(self) -> None:
        should_poll = self._active and self.state.auto_refresh_enabled and self.state.page_visible
        if should_poll and self._poll_timer is None:
            self._poll_timer = self._scheduler.call_every(self._refresh_interval, self._on_poll)
        elif not should_poll and self._poll_timer is not None:
            self._poll_timer.cancel()
            self._poll_timer = None

    def _on_poll(self) -> None:
        self._trigger("poll")

    def _on_visibility_change(self, visible: bool) -> None:
        if not self._active:
            return
        was_visible = self.state.page_visible
        self.state.page_visible = bool(visible)
        self._sync_poll_timer()
        if visible and not was_visible and self.state.auto_refresh_enabled:
            self._trigger("visible")

    def _update_text(self) -> None:
        self.state.last_updated_text = format_time_ago(
            self.state.last_updated, self._clock(), never=NEVER_UPDATED_TEXT
        )

    # read-only view

    @property
    def data(self) -> Any:
        return self._data

    @property
    def last_updated_text(self) -> str:
        return self.state.last_updated_text

    @property
    def last_error(self) -> Optional[Exception]:
        return self.state.last_error

    @property
    def is_refreshing(self) -> bool:
        return self.state.is_refreshing

    @property
    def is_auto_refresh_enabled(self) -> bool:
        return self.state.auto_refresh_enabled

    @property
    def is_page_visible(self) -> bool:
        return self.state.page_visible

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_polling(self) -> bool:
        return self._poll_timer is not None

    @property
    def is_stale(self) -> bool:
        if self.state.last_updated is None:
            return True
        return self._clock() - self.state.last_updated > self._stale_after
