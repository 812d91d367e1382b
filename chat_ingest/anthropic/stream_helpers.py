"""Streaming dialect for the Anthropic Messages API.

Frames are JSON objects discriminated by ``type``. Only
``content_block_delta`` carries content: its nested ``delta.type`` selects the
reasoning (``thinking_delta``) or visible (``text_delta``) channel. An
``error`` frame ends the stream with a provider error. Lifecycle frames are
no-ops; the stream normally ends by EOF after ``message_stop``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..base.logging import get_logger, log_event
from ..base.streaming.events import DeltaEvent, ErrorEvent, TextDelta, ThinkingDelta
from ..base.streaming.streaming_support import decode_payload

_logger = get_logger("chat_ingest.anthropic")

NOOP_TYPES = frozenset(
    {"message_start", "content_block_start", "content_block_stop", "message_delta", "message_stop", "ping"}
)


def format_error(error: Dict[str, Any]) -> ErrorEvent:
    """Build the user-facing error for an ``error`` frame.

    ``"Anthropic API Error"`` followed by ``": <message>"``, ``" (Type: <type>)"``
    and ``" [Code: <code>]"`` for each string field present.
    """
    message = "Anthropic API Error"
    msg, etype, code = error.get("message"), error.get("type"), error.get("code")
    if isinstance(msg, str):
        message += f": {msg}"
    if isinstance(etype, str):
        message += f" (Type: {etype})"
    if isinstance(code, str):
        message += f" [Code: {code}]"
    event_code = code if isinstance(code, str) else etype if isinstance(etype, str) else None
    return ErrorEvent(message=message, code=event_code)


class AnthropicDialect:
    """Dialect A: typed event frames with a separate reasoning channel."""

    name = "anthropic"

    def parse(self, payload: str) -> List[DeltaEvent]:
        data = decode_payload(payload, self.name)
        if data is None:
            return []
        frame_type = data.get("type")
        if frame_type == "content_block_delta":
            return self._parse_delta(data.get("delta"))
        if frame_type == "error":
            err = data.get("error")
            return [format_error(err if isinstance(err, dict) else {})]
        if frame_type in NOOP_TYPES:
            log_event(_logger, "dialect.noop", level=logging.DEBUG, dialect=self.name, frame_type=frame_type)
        return []

    @staticmethod
    def _parse_delta(delta: Any) -> List[DeltaEvent]:
        if not isinstance(delta, dict):
            return []
        kind = delta.get("type")
        if kind == "thinking_delta":
            text = delta.get("thinking")
            return [ThinkingDelta(text)] if isinstance(text, str) and text else []
        if kind == "text_delta":
            text = delta.get("text")
            return [TextDelta(text)] if isinstance(text, str) and text else []
        return []


__all__ = ["AnthropicDialect", "format_error", "NOOP_TYPES"]
