from __future__ import annotations

from threading import RLock
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Signal(Generic[T]):
    """
    Minimal signal/slot primitive for domain events.

    Subscribers run synchronously in the emitting thread, in connection order.
    A subscriber that raises stops the emission and the error propagates to
    the emitter; weak proxies whose referent is gone are pruned instead.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._subscribers: list[Callable[[T], None]] = []
        self._lock: RLock = RLock()

    def connect(self, callback: Callable[[T], None]) -> Callable[[T], None]:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)
        return callback

    def disconnect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def emit(self, payload: T) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        stale_callbacks: list[Callable[[T], None]] = []
        for callback in subscribers:
            try:
                callback(payload)
            except ReferenceError:
                stale_callbacks.append(callback)
        if stale_callbacks:
            with self._lock:
                for callback in stale_callbacks:
                    if callback in self._subscribers:
                        self._subscribers.remove(callback)
