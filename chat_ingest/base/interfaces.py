"""Engine-facing protocol surface.

Re-exports the protocols the stream controller depends on. Concrete
implementations live in the dialect packages (``chat_ingest.anthropic``,
``chat_ingest.openai``, ``chat_ingest.hunyuan``), ``chat_ingest.service``
(request building) and ``chat_ingest.persistence`` (message storage).
"""

from .interfaces_parts.request_builder import RequestBuilder
from .interfaces_parts.stream_dialect import StreamDialect

__all__ = ["RequestBuilder", "StreamDialect"]
