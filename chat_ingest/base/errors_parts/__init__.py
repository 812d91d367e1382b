"""Errors parts package.

Prefer importing from ``chat_ingest.base.errors`` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .stream_state_error import StreamStateError
from .classification import classify_exception, classify_status, is_retryable

__all__ = [
    "ErrorCode",
    "ProviderError",
    "StreamStateError",
    "classify_exception",
    "classify_status",
    "is_retryable",
]
