from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol

from ..common.logging import get_logger

log = get_logger(__name__)


class PeriodicTask(Protocol):
    def cancel(self) -> None:
        raise NotImplementedError


class Scheduler(Protocol):
    def call_every(self, interval: float, callback: Callable[[], None]) -> PeriodicTask:
        raise NotImplementedError


class _LoopTimer:
    """Repeating timer built on loop.call_later; re-arms itself after each tick."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._cancelled = False
        self._arm()

    def _arm(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._tick)

    def _tick(self) -> None:
        if self._cancelled:
            return
        try:
            self._callback()
        except Exception:
            log.exception("scheduler.callback_failed")
        if not self._cancelled:
            self._arm()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> PeriodicTask:
        loop = self._loop or asyncio.get_running_loop()
        return _LoopTimer(loop, float(interval), callback)
