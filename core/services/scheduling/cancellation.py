from __future__ import annotations

from threading import Event

from core.exceptions import JobCancelledError


class CancelToken:
    """Coarse-grained cancellation for a scheduling run; checked between stages."""

    def __init__(self) -> None:
        self._event = Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled():
            raise JobCancelledError("Scheduling run canceled.")


__all__ = ["CancelToken", "JobCancelledError"]
