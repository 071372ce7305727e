"""
Signal — a value holder that notifies subscribers when the value changes.

Each ``SessionManager`` owns its own signals; there is no global state.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Signal(Generic[T]):
    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Store ``value`` and notify subscribers (always, like a behaviour subject)."""
        self._value = value
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("Signal subscriber %r failed", callback)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """
        Register ``callback`` and call it once with the current value.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)
        callback(self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
