"""In-progress message state and event application.

The accumulator owns the ``AccumulatedMessage`` for exactly one session and
is the only writer. Reasoning text is micro-batched: deltas land in a private
pending buffer that is moved into the message at most once per flush interval
(default 500 ms), so observers are not notified for every reasoning token.

All public methods hold one lock, so a flush triggered from a UI tick via
``flush_if_due`` never interleaves with an append from the stream worker.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..errors import StreamStateError
from .events import DeltaEvent, Done, ErrorEvent, Reference, TextDelta, ThinkingDelta

Clock = Callable[[], float]


@dataclass
class AccumulatedMessage:
    """Mutable reply state for one session.

    Attributes:
        text: Visible reply text (append-only).
        thinking: Flushed reasoning text (append-only).
        references: Citations in arrival order, unique by ``index``.
        error: First provider or transport error observed, if any.
        sealed: Set once the message is finalized; no further mutation.
    """

    text: str = ""
    thinking: str = ""
    references: List[Reference] = field(default_factory=list)
    error: Optional[ErrorEvent] = None
    sealed: bool = False

    def sorted_references(self) -> List[Reference]:
        return sorted(self.references, key=lambda r: r.index)


@dataclass(frozen=True)
class MessageSnapshot:
    """Immutable copy of an ``AccumulatedMessage`` handed to observers."""

    text: str
    thinking: str
    references: tuple
    error: Optional[ErrorEvent]


class Accumulator:
    """Apply ``DeltaEvent`` values to a message, one at a time.

    Parameters
    ----------
    flush_interval:
        Minimum seconds between reasoning flushes.
    clock:
        Monotonic time source; injectable for tests.
    on_change:
        Called with a ``MessageSnapshot`` whenever observable state changes.
        It runs while the accumulator lock is held and must not call back into
        the accumulator.
    """

    def __init__(
        self,
        *,
        flush_interval: float = 0.5,
        clock: Clock = time.monotonic,
        on_change: Optional[Callable[[MessageSnapshot], None]] = None,
    ) -> None:
        self.message = AccumulatedMessage()
        self._pending: List[str] = []
        self._flush_interval = flush_interval
        self._clock = clock
        self._last_flush = clock()
        self._on_change = on_change
        self._lock = threading.Lock()
        self._reference_index: Dict[int, Reference] = {}
        self.applied = 0

    @property
    def has_pending_thinking(self) -> bool:
        with self._lock:
            return bool(self._pending)

    def apply(self, event: DeltaEvent) -> bool:
        """Apply one event; return ``True`` when it ends the stream."""
        with self._lock:
            self._ensure_open()
            if isinstance(event, TextDelta):
                if event.text:
                    self.message.text += event.text
                    self.applied += 1
                    self._notify()
                return False
            if isinstance(event, ThinkingDelta):
                if event.text:
                    self._pending.append(event.text)
                    self.applied += 1
                    if self._clock() - self._last_flush > self._flush_interval:
                        self._flush_locked()
                return False
            if isinstance(event, Reference):
                if event.index not in self._reference_index:
                    self._reference_index[event.index] = event
                    self.message.references.append(event)
                    self.applied += 1
                    self._notify()
                return False
            if isinstance(event, ErrorEvent):
                if self.message.error is None:
                    self.message.error = event
                    self._notify()
                return True
            if isinstance(event, Done):
                return True
            raise TypeError(f"unsupported stream event: {event!r}")

    def record_error(self, error: ErrorEvent) -> None:
        """Record a transport or HTTP error (first error wins)."""
        with self._lock:
            self._ensure_open()
            if self.message.error is None:
                self.message.error = error
                self._notify()

    def flush(self) -> bool:
        """Move pending reasoning into the message. Returns ``True`` if anything moved."""
        with self._lock:
            return self._flush_locked()

    def flush_if_due(self) -> bool:
        """Flush only when the interval has elapsed; for periodic UI ticks."""
        with self._lock:
            if self.message.sealed or not self._pending:
                return False
            if self._clock() - self._last_flush <= self._flush_interval:
                return False
            return self._flush_locked()

    def seal(self) -> AccumulatedMessage:
        """Flush remaining reasoning and freeze the message."""
        with self._lock:
            if not self.message.sealed:
                self._flush_locked()
                self.message.sealed = True
            return self.message

    def snapshot(self) -> MessageSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _flush_locked(self) -> bool:
        self._last_flush = self._clock()
        if not self._pending:
            return False
        self.message.thinking += "".join(self._pending)
        self._pending.clear()
        self._notify()
        return True

    def _ensure_open(self) -> None:
        if self.message.sealed:
            raise StreamStateError("message already finalized")

    def _snapshot_locked(self) -> MessageSnapshot:
        m = self.message
        return MessageSnapshot(text=m.text, thinking=m.thinking, references=tuple(m.references), error=m.error)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self._snapshot_locked())


__all__ = ["AccumulatedMessage", "Accumulator", "Clock", "MessageSnapshot"]
