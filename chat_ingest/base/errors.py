"""Unified error taxonomy public surface.

Re-exports the one-class-per-file implementations under
``chat_ingest.base.errors_parts`` under a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.stream_state_error import StreamStateError
from .errors_parts.classification import classify_exception, classify_status, is_retryable

__all__ = [
    "ErrorCode",
    "ProviderError",
    "StreamStateError",
    "classify_exception",
    "classify_status",
    "is_retryable",
]
