"""Cancellation parts package; import from ``chat_ingest.base.cancellation``."""

from .cancellation_token import CancellationToken
from .cancelled_error import CancelledError

__all__ = ["CancellationToken", "CancelledError"]
