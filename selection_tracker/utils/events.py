"""Observer list used for update and lifecycle notifications."""

from __future__ import annotations

from typing import Any, Callable


class Event:
    """
    An explicit list of listeners invoked in subscription order.

    Adding a listener that is already subscribed is a no-op, so callers can
    subscribe defensively without causing duplicate notifications.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[..., Any]] = []

    def add_listener(self, listener: Callable[..., Any]) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Callable[..., Any]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def invoke(self, *args: Any) -> None:
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener(*args)

    def __contains__(self, listener: Callable[..., Any]) -> bool:
        return listener in self._listeners

    def __len__(self) -> int:
        return len(self._listeners)
