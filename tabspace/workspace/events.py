"""Change channels for binding UI to workspace state.

A ``StateChannel`` holds the latest published value and pushes every new one
to its listeners.  New listeners receive the current value immediately, so a
tab bar subscribing late still renders the right tabs.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")

Listener = Callable[[T], None]
Unsubscribe = Callable[[], None]


class StateChannel(Generic[T]):
    """Latest-value publish/subscribe channel."""

    def __init__(self, name: str, initial: T) -> None:
        self.name = name
        self._value = initial
        self._listeners: list[Listener[T]] = []

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, listener: Listener[T], *, replay: bool = True) -> Unsubscribe:
        """Register ``listener``; returns a callable that removes it again."""
        self._listeners.append(listener)
        if replay:
            self._deliver(listener, self._value)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, value: T) -> None:
        self._value = value
        # Copy so listeners may unsubscribe while being notified.
        for listener in list(self._listeners):
            self._deliver(listener, value)

    def _deliver(self, listener: Listener[T], value: T) -> None:
        try:
            listener(value)
        except Exception:
            logger.exception("Listener on channel '{}' raised", self.name)

    def __len__(self) -> int:
        return len(self._listeners)
