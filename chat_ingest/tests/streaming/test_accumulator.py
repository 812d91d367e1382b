"""Unit tests for the ``Accumulator``.

Covers append-only text, reference de-duplication, first-error-wins, the
reasoning micro-batching boundary and sealing.
"""
from __future__ import annotations

import threading

import pytest

from chat_ingest.base.errors import StreamStateError
from chat_ingest.base.streaming.accumulator import Accumulator
from chat_ingest.base.streaming.events import Done, ErrorEvent, Reference, TextDelta, ThinkingDelta


def test_text_is_append_only_and_notifies(fake_clock):
    snapshots = []
    acc = Accumulator(clock=fake_clock, on_change=snapshots.append)
    seen = []
    for piece in ("He", "llo", ", ", "world"):
        assert acc.apply(TextDelta(piece)) is False  # nosec B101
        seen.append(acc.message.text)
    assert acc.message.text == "Hello, world"  # nosec B101
    assert all(later.startswith(earlier) for earlier, later in zip(seen, seen[1:]))  # nosec B101
    assert [s.text for s in snapshots] == seen  # nosec B101


def test_duplicate_reference_index_keeps_first(fake_clock):
    acc = Accumulator(clock=fake_clock)
    acc.apply(Reference(1, "A", "u1"))
    acc.apply(Reference(2, "B", "u2"))
    acc.apply(Reference(1, "C", "u3"))
    assert acc.message.references == [Reference(1, "A", "u1"), Reference(2, "B", "u2")]  # nosec B101


def test_first_error_wins_and_text_is_kept(fake_clock):
    acc = Accumulator(clock=fake_clock)
    acc.apply(TextDelta("partial"))
    assert acc.apply(ErrorEvent("first", "server_error")) is True  # nosec B101
    acc.record_error(ErrorEvent("second"))
    assert acc.message.error == ErrorEvent("first", "server_error")  # nosec B101
    assert acc.message.text == "partial"  # nosec B101


def test_done_is_terminal_without_mutation(fake_clock):
    acc = Accumulator(clock=fake_clock)
    assert acc.apply(Done()) is True  # nosec B101
    assert acc.message.text == "" and acc.message.error is None  # nosec B101


def test_thinking_is_batched_until_interval_elapses(fake_clock):
    updates = []
    acc = Accumulator(flush_interval=0.5, clock=fake_clock, on_change=lambda s: updates.append(s.thinking))
    acc.apply(ThinkingDelta("a"))
    fake_clock.advance(200)
    acc.apply(ThinkingDelta("b"))
    fake_clock.advance(200)
    acc.apply(ThinkingDelta("c"))
    assert acc.message.thinking == ""  # nosec B101
    assert updates == []  # nosec B101

    fake_clock.advance(101)  # 501 ms since creation
    acc.apply(ThinkingDelta("d"))
    assert acc.message.thinking == "abcd"  # nosec B101
    assert updates == ["abcd"]  # nosec B101

    fake_clock.advance(450)
    acc.apply(ThinkingDelta("e"))
    assert acc.message.thinking == "abcd"  # nosec B101

    acc.flush()
    assert acc.message.thinking == "abcde"  # nosec B101


def test_flush_if_due_respects_interval(fake_clock):
    acc = Accumulator(flush_interval=0.5, clock=fake_clock)
    acc.apply(ThinkingDelta("x"))
    assert acc.flush_if_due() is False  # nosec B101
    fake_clock.advance(600)
    assert acc.flush_if_due() is True  # nosec B101
    assert acc.message.thinking == "x"  # nosec B101
    assert acc.flush_if_due() is False  # nosec B101


def test_seal_flushes_pending_and_blocks_mutation(fake_clock):
    acc = Accumulator(clock=fake_clock)
    acc.apply(ThinkingDelta("tail"))
    message = acc.seal()
    assert message.thinking == "tail" and message.sealed  # nosec B101
    with pytest.raises(StreamStateError):
        acc.apply(TextDelta("late"))
    assert acc.seal() is message  # nosec B101


def test_concurrent_flush_and_append_keep_full_concatenation():
    acc = Accumulator(flush_interval=0.0)
    pieces = [f"{i};" for i in range(500)]
    stop = threading.Event()

    def ticker() -> None:
        while not stop.is_set():
            acc.flush_if_due()

    t = threading.Thread(target=ticker)
    t.start()
    try:
        for p in pieces:
            acc.apply(ThinkingDelta(p))
    finally:
        stop.set()
        t.join()
    acc.seal()
    assert acc.message.thinking == "".join(pieces)  # nosec B101


def test_unknown_event_type_is_rejected(fake_clock):
    with pytest.raises(TypeError):
        Accumulator(clock=fake_clock).apply("text")  # type: ignore[arg-type]
