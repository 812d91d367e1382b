"""chat_ingest package

Streaming response ingestion engine for chat-completion back ends.

Public API (re-exported):
    - Controller: :class:`StreamSessionController`
    - Configuration: :class:`ProviderConfig`, :class:`ChatMessageDTO`
    - Request building: :class:`ChatRequestBuilder`
    - Events: :class:`TextDelta`, :class:`ThinkingDelta`, :class:`Reference`,
      :class:`ErrorEvent`, :class:`Done`
    - Persistence: :class:`InMemoryMessageRepository`, :class:`StoredMessage`
    - Errors: :class:`ProviderError`, :class:`ErrorCode`
"""

from .base.dto import ChatMessageDTO, ProviderConfig
from .base.errors import ErrorCode, ProviderError
from .base.routing.selector import select_dialect
from .base.streaming import (
    Done,
    ErrorEvent,
    FinalizeResult,
    Reference,
    SessionState,
    StreamStatus,
    StreamUpdate,
    TextDelta,
    ThinkingDelta,
)
from .base.streaming.stream_controller import StreamSessionController
from .persistence import InMemoryMessageRepository, StoredMessage
from .service.chat_request_build import ChatRequestBuilder

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ChatMessageDTO",
    "ProviderConfig",
    "ErrorCode",
    "ProviderError",
    "select_dialect",
    "Done",
    "ErrorEvent",
    "FinalizeResult",
    "Reference",
    "SessionState",
    "StreamStatus",
    "StreamUpdate",
    "TextDelta",
    "ThinkingDelta",
    "StreamSessionController",
    "InMemoryMessageRepository",
    "StoredMessage",
    "ChatRequestBuilder",
]
