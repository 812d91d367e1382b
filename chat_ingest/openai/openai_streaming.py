"""Streaming dialect for OpenAI-compatible chat completion endpoints.

Each frame carries ``choices[0].delta.content``; the stream ends with
``data: [DONE]`` which the frame demultiplexer handles. DeepSeek, Qwen,
Moonshot, Zhipu, Google's compatibility endpoint and OpenRouter all speak
this shape, and it is the fallback for unknown providers.
"""

from __future__ import annotations

from typing import List

from ..base.streaming.events import DeltaEvent, TextDelta
from ..base.streaming.streaming_support import decode_payload, delta_content, first_choice


class OpenAICompatibleDialect:
    """Dialect B: plain text deltas only."""

    name = "openai"

    def parse(self, payload: str) -> List[DeltaEvent]:
        data = decode_payload(payload, self.name)
        if data is None:
            return []
        choice = first_choice(data)
        if choice is None:
            return []
        content = delta_content(choice)
        return [TextDelta(content)] if content else []


__all__ = ["OpenAICompatibleDialect"]
