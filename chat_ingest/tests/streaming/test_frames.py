"""Unit tests for ``FrameDemultiplexer`` and ``parse_error_body``.

Covers cross-chunk reassembly (including split UTF-8 characters), marker
filtering, the ``[DONE]`` sentinel, EOF tail handling and the error-body
message precedence.
"""
from __future__ import annotations

import json

from chat_ingest.base.streaming.events import Done, ErrorEvent
from chat_ingest.base.streaming.frames import FrameDemultiplexer, parse_error_body


def test_frame_split_across_chunks_is_reassembled():
    demux = FrameDemultiplexer()
    first = demux.feed(b'data: {"choices":[{"delta":{"con')
    second = demux.feed(b'tent":"Hi"}}]}\n\n')
    assert first == []  # nosec B101
    assert second == ['{"choices":[{"delta":{"content":"Hi"}}]}']  # nosec B101


def test_multibyte_character_split_between_chunks():
    raw = 'data: {"t":"你好"}\n'.encode("utf-8")
    cut = raw.index("好".encode("utf-8")) + 1
    demux = FrameDemultiplexer()
    frames = demux.feed(raw[:cut]) + demux.feed(raw[cut:])
    assert [json.loads(f)["t"] for f in frames] == ["你好"]  # nosec B101


def test_lines_without_marker_and_blank_lines_are_discarded():
    demux = FrameDemultiplexer()
    frames = demux.feed(b"event: ping\n: keep-alive\n\n\ndata: one\r\ndata:two\n")
    assert frames == ["one", "two"]  # nosec B101
    assert demux.discarded == 2  # nosec B101


def test_done_sentinel_stops_demultiplexer():
    demux = FrameDemultiplexer()
    frames = demux.feed(b"data: a\ndata:  [DONE] \ndata: after\n")
    assert frames[0] == "a"  # nosec B101
    assert isinstance(frames[1], Done)  # nosec B101
    assert len(frames) == 2  # nosec B101
    assert demux.done is True  # nosec B101
    assert demux.feed(b"data: later\n") == []  # nosec B101
    assert demux.close() == []  # nosec B101


def test_unterminated_tail_is_flushed_on_close():
    demux = FrameDemultiplexer()
    assert demux.feed(b"data: head\ndata: tail") == ["head"]  # nosec B101
    assert demux.close() == ["tail"]  # nosec B101
    assert demux.close() == []  # nosec B101


def test_iter_frames_handles_whole_stream():
    chunks = [b"da", b"ta: x\n", b"data: [DONE]\n", b"data: ignored\n"]
    frames = list(FrameDemultiplexer().iter_frames(chunks))
    assert frames[0] == "x" and isinstance(frames[1], Done) and len(frames) == 2  # nosec B101


def test_prefixless_mode_accepts_every_line():
    demux = FrameDemultiplexer(data_prefix=None)
    assert demux.feed(b'{"a":1}\n\n{"b":2}\n') == ['{"a":1}', '{"b":2}']  # nosec B101


def test_error_body_prefers_nested_error_message():
    body = json.dumps({"error": {"message": "bad key", "type": "auth"}, "message": "outer"}).encode()
    event = parse_error_body(body, 401)
    assert event == ErrorEvent(message="bad key", code="auth")  # nosec B101


def test_error_body_falls_back_to_top_level_message():
    body = json.dumps({"error": "quota", "message": "slow down"}).encode()
    assert parse_error_body(body, 429) == ErrorEvent(message="slow down", code="rate_limit")  # nosec B101


def test_error_body_falls_back_to_raw_text():
    event = parse_error_body(b"upstream exploded", 502)
    assert event.message == "upstream exploded"  # nosec B101
    assert event.code == "transient"  # nosec B101


def test_error_body_empty_keeps_empty_text():
    event = parse_error_body(b"", 500)
    assert event.message == "" and event.code == "server_error"  # nosec B101


def test_error_body_too_deeply_nested_falls_back_to_raw_text():
    body = b"[" * 100000 + b"]" * 100000
    event = parse_error_body(body, 503)
    assert event.message == body.decode() and event.code == "unavailable"  # nosec B101
