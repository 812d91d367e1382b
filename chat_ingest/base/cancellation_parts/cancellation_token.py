"""Cooperative cancellation token implementation.

A stream session owns one ``CancellationToken``. The worker loop polls it
between chunks; ``cancel`` also runs registered callbacks so a blocking read
can be interrupted by closing the underlying response.
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, Optional

from .cancelled_error import CancelledError
from .state import State


class CancellationToken:
    """A thread-safe, one-shot cancellation flag with callbacks."""

    def __init__(self) -> None:
        self._state = State()
        self._lock = Lock()

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def cancel(self, reason: str | None = None) -> bool:
        """Request cancellation and run registered callbacks once.

        Returns ``True`` when this call performed the cancellation and
        ``False`` when the token was already cancelled.
        """
        with self._lock:
            if self._state.cancelled:
                return False
            self._state.cancelled = True
            self._state.reason = reason
            callbacks = list(self._state.callbacks)
            self._state.callbacks.clear()
        for cb in callbacks:
            cb(reason)
        return True

    def add_callback(self, callback: Callable[[Optional[str]], None]) -> None:
        """Register ``callback`` to run on cancel (immediately if already cancelled)."""
        with self._lock:
            if not self._state.cancelled:
                self._state.callbacks.append(callback)
                return
            reason = self._state.reason
        callback(reason)

    def remove_callback(self, callback: Callable[[Optional[str]], None]) -> None:
        with self._lock:
            if callback in self._state.callbacks:
                self._state.callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if the token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "stream cancelled")

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._state.cancelled}, reason={self._state.reason!r})"


__all__ = ["CancellationToken"]
