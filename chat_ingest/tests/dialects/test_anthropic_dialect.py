"""Tests for the Anthropic streaming dialect."""
from __future__ import annotations

import json

from chat_ingest.anthropic import AnthropicDialect
from chat_ingest.base.streaming.events import ErrorEvent, TextDelta, ThinkingDelta

dialect = AnthropicDialect()


def _parse(obj) -> list:
    return dialect.parse(json.dumps(obj))


def test_text_and_thinking_deltas_map_to_separate_channels():
    assert _parse({"type": "content_block_delta", "delta": {"type": "text_delta", "text": "Hi"}}) == [  # nosec B101
        TextDelta("Hi")
    ]
    assert _parse(  # nosec B101
        {"type": "content_block_delta", "delta": {"type": "thinking_delta", "thinking": "hmm"}}
    ) == [ThinkingDelta("hmm")]


def test_lifecycle_frames_are_noops():
    for frame_type in ("message_start", "content_block_start", "content_block_stop", "message_delta", "message_stop", "ping"):
        assert _parse({"type": frame_type}) == []  # nosec B101


def test_unknown_types_and_malformed_payloads_are_skipped():
    assert _parse({"type": "brand_new"}) == []  # nosec B101
    assert _parse({"type": "content_block_delta", "delta": {"type": "signature_delta", "signature": "x"}}) == []  # nosec B101
    assert dialect.parse("{not json") == []  # nosec B101
    assert dialect.parse("[1, 2]") == []  # nosec B101


def test_empty_text_produces_no_event():
    assert _parse({"type": "content_block_delta", "delta": {"type": "text_delta", "text": ""}}) == []  # nosec B101


def test_error_frame_formats_all_present_fields():
    events = _parse({"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}})
    assert events == [  # nosec B101
        ErrorEvent(message="Anthropic API Error: Overloaded (Type: overloaded_error)", code="overloaded_error")
    ]


def test_error_frame_with_code_and_without_message():
    events = _parse({"type": "error", "error": {"code": "E42"}})
    assert events == [ErrorEvent(message="Anthropic API Error [Code: E42]", code="E42")]  # nosec B101


def test_error_frame_without_details():
    assert _parse({"type": "error"}) == [ErrorEvent(message="Anthropic API Error")]  # nosec B101
