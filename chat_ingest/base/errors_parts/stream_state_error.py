"""Programming error raised when a sealed message is mutated."""

from __future__ import annotations


class StreamStateError(RuntimeError):
    """Raised when an event is applied to a message that was already finalized.

    Seeing this means a caller kept feeding events after the session reached
    ``FINALIZING``; it is never produced by provider input.
    """


__all__ = ["StreamStateError"]
