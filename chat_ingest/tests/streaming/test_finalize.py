"""Tests for reference rendering and ``finalize_message``."""
from __future__ import annotations

from chat_ingest.base.logging import LogContext, get_logger
from chat_ingest.base.streaming.accumulator import Accumulator
from chat_ingest.base.streaming.events import Reference, TextDelta, ThinkingDelta
from chat_ingest.base.streaming.session import StreamStatus
from chat_ingest.base.streaming.streaming_finalize import (
    finalize_message,
    render_content,
    render_references,
)
from chat_ingest.base.streaming.streaming_metrics import StreamMetrics
from chat_ingest.persistence import StoredMessage


def test_render_references_orders_by_index():
    refs = [Reference(2, "B", "u2"), Reference(1, "A", "u1")]
    assert render_content("Answer", refs) == (  # nosec B101
        "Answer\n\n---\n\n\n\n**References:**\n\n[1] A: u1\n\n[2] B: u2\n"
    )


def test_no_references_leaves_text_untouched():
    assert render_references([]) == ""  # nosec B101
    assert render_content("plain", []) == "plain"  # nosec B101


def _placeholder(repo, message_id="m1"):
    repo.insert(StoredMessage(id=message_id, conversation_id="c", role="assistant", status="loading"))


def test_finalize_persists_once_with_rendered_content(repo, fake_clock, log_capture):
    _placeholder(repo)
    acc = Accumulator(clock=fake_clock)
    acc.apply(TextDelta("Hi"))
    acc.apply(ThinkingDelta("why"))
    acc.apply(Reference(3, "T", "U"))
    result = finalize_message(
        logger=get_logger("chat_ingest.test"),
        ctx=LogContext(provider="hunyuan", model="m"),
        accumulator=acc,
        repository=repo,
        message_id="m1",
        provider_id="hunyuan",
        model_id="m",
        status=StreamStatus.COMPLETED,
        metrics=StreamMetrics(emitted=3),
    )
    stored = repo.get("m1")
    assert result.persisted and repo.update_count == 1 and repo.save_count == 1  # nosec B101
    assert stored.content == result.content == "Hi\n\n---\n\n\n\n**References:**\n\n[3] T: U\n"  # nosec B101
    assert stored.thinking == "why" and stored.status == "completed"  # nosec B101
    assert stored.provider_id == "hunyuan" and stored.model_id == "m"  # nosec B101
    events = [e for e in log_capture if e.get("event") == "stream.finalize"]
    assert events and events[0]["phase"] == "finalize" and events[0]["emitted"] is True  # nosec B101
    assert events[0]["events_applied"] == 3 and "total_duration_ms" in events[0]  # nosec B101
    assert result.metrics.total_duration_ms is not None  # nosec B101


class _BrokenRepo:
    def update(self, message_id, **fields):
        raise OSError("disk full")

    def save(self):  # pragma: no cover - never reached
        raise AssertionError("save after failed update")


def test_persistence_failure_is_reported_not_raised(fake_clock, log_capture):
    acc = Accumulator(clock=fake_clock)
    acc.apply(TextDelta("kept"))
    result = finalize_message(
        logger=get_logger("chat_ingest.test"),
        ctx=LogContext(),
        accumulator=acc,
        repository=_BrokenRepo(),  # type: ignore[arg-type]
        message_id="m1",
        provider_id="openai",
        model_id="m",
        status=StreamStatus.COMPLETED,
        metrics=StreamMetrics(),
    )
    assert result.persisted is False  # nosec B101
    assert "disk full" in (result.persist_error or "")  # nosec B101
    assert result.content == "kept" and acc.message.text == "kept"  # nosec B101
    assert any(e.get("event") == "stream.persist_failed" for e in log_capture)  # nosec B101
