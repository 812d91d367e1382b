"""Tests for the OpenAI-compatible streaming dialect."""
from __future__ import annotations

import json

from chat_ingest.base.streaming.events import TextDelta
from chat_ingest.openai import OpenAICompatibleDialect

dialect = OpenAICompatibleDialect()


def test_delta_content_becomes_text():
    payload = json.dumps({"choices": [{"delta": {"content": "Hel"}}]})
    assert dialect.parse(payload) == [TextDelta("Hel")]  # nosec B101


def test_missing_or_empty_content_is_noop():
    for obj in (
        {"choices": [{"delta": {"role": "assistant"}}]},
        {"choices": [{"delta": {"content": ""}}]},
        {"choices": [{"delta": {"content": None}, "finish_reason": "stop"}]},
        {"choices": []},
        {"usage": {"total_tokens": 3}},
    ):
        assert dialect.parse(json.dumps(obj)) == []  # nosec B101


def test_only_first_choice_is_used():
    payload = json.dumps({"choices": [{"delta": {"content": "a"}}, {"delta": {"content": "b"}}]})
    assert dialect.parse(payload) == [TextDelta("a")]  # nosec B101


def test_non_json_payload_is_skipped(log_capture):
    assert dialect.parse("garbage") == []  # nosec B101
    skips = [e for e in log_capture if e.get("event") == "stream.decode_skip"]
    assert skips and skips[0]["dialect"] == "openai"  # nosec B101
