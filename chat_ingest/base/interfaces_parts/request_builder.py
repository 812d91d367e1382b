"""RequestBuilder Protocol (single-class module)."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

import httpx

from ..dto.chat import ChatMessageDTO
from ..dto.provider_config import ProviderConfig


@runtime_checkable
class RequestBuilder(Protocol):
    """Build the outbound streaming request for a session.

    The engine treats the returned request as opaque; it only sends it and
    reads the streamed body.
    """

    def build(self, config: ProviderConfig, messages: Sequence[ChatMessageDTO]) -> httpx.Request:
        ...
