from __future__ import annotations

from typing import Callable, Protocol

from ..common.logging import get_logger

log = get_logger(__name__)

VisibilityListener = Callable[[bool], None]


class VisibilitySource(Protocol):
    def is_visible(self) -> bool:
        raise NotImplementedError

    def subscribe(self, listener: VisibilityListener) -> Callable[[], None]:
        raise NotImplementedError


class VisibilitySignal:
    """Settable visibility source; listeners hear about changes only."""

    def __init__(self, visible: bool = True):
        self._visible = bool(visible)
        self._listeners: list[VisibilityListener] = []

    def is_visible(self) -> bool:
        return self._visible

    def set_visible(self, visible: bool) -> None:
        visible = bool(visible)
        if visible == self._visible:
            return
        self._visible = visible
        log.debug("visibility.changed", visible=visible)
        for listener in list(self._listeners):
            listener(visible)

    def subscribe(self, listener: VisibilityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
