"""Streaming pipeline building blocks.

Leaf components are re-exported here. The controller lives in
``chat_ingest.base.streaming.stream_controller`` (also re-exported from the
top-level ``chat_ingest`` package); it is not imported here because the
dialect packages depend on ``events`` from this package.
"""

from .accumulator import AccumulatedMessage, Accumulator, MessageSnapshot
from .events import DeltaEvent, Done, ErrorEvent, Reference, TextDelta, ThinkingDelta, is_terminal
from .frames import FrameDemultiplexer, parse_error_body
from .session import SessionState, StreamSession, StreamStatus, StreamUpdate
from .streaming_finalize import FinalizeResult, finalize_message, render_content, render_references
from .streaming_metrics import StreamMetrics

__all__ = [
    "AccumulatedMessage",
    "Accumulator",
    "MessageSnapshot",
    "DeltaEvent",
    "Done",
    "ErrorEvent",
    "Reference",
    "TextDelta",
    "ThinkingDelta",
    "is_terminal",
    "FrameDemultiplexer",
    "parse_error_body",
    "SessionState",
    "StreamSession",
    "StreamStatus",
    "StreamUpdate",
    "FinalizeResult",
    "finalize_message",
    "render_content",
    "render_references",
    "StreamMetrics",
]
