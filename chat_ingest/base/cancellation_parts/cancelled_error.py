"""Cancellation error type."""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation observes a cooperative cancellation request.

    Distinguishes user-initiated cancellation from transport failures so the
    controller can finalize the partial message without populating the
    session's error channel.
    """


__all__ = ["CancelledError"]
