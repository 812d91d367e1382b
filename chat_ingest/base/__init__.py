"""
chat_ingest base package.

Provider-agnostic building blocks: error taxonomy, cancellation, structured
logging, transport timeouts, DTOs, protocols and the streaming pipeline
(``chat_ingest.base.streaming``).
"""

from .cancellation import CancellationToken, CancelledError
from .errors import ErrorCode, ProviderError, StreamStateError, classify_exception
from .logging import LogContext, get_logger, log_event, normalized_log_event
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    "CancellationToken",
    "CancelledError",
    "ErrorCode",
    "ProviderError",
    "StreamStateError",
    "classify_exception",
    "LogContext",
    "get_logger",
    "log_event",
    "normalized_log_event",
    "TimeoutConfig",
    "get_timeout_config",
]
