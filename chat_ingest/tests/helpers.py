"""Transport fakes shared by the engine tests.

``ScriptedStream`` replays fixed byte chunks; ``GatedStream`` hands chunks
over one at a time and blocks in between so tests can act (cancel, start a
new session) while a stream is provably in flight.
"""
from __future__ import annotations

import json
import queue
import threading
from typing import Any, Callable, Iterable, Iterator, List, Optional

import httpx


class ScriptedStream(httpx.SyncByteStream):
    """Replay a fixed list of chunks, optionally failing afterwards."""

    def __init__(self, chunks: Iterable[bytes], fail_with: Optional[Exception] = None) -> None:
        self._chunks = list(chunks)
        self._fail_with = fail_with

    def __iter__(self) -> Iterator[bytes]:
        yield from self._chunks
        if self._fail_with is not None:
            raise self._fail_with


class GatedStream(httpx.SyncByteStream):
    """Stream fed by the test thread; ``close`` unblocks a pending read."""

    def __init__(self, chunks: Iterable[bytes] = ()) -> None:
        self._queue: "queue.Queue[Optional[bytes]]" = queue.Queue()
        for c in chunks:
            self._queue.put(c)
        self.closed = threading.Event()

    def push(self, chunk: bytes) -> None:
        self._queue.put(chunk)

    def end(self) -> None:
        self._queue.put(None)

    def __iter__(self) -> Iterator[bytes]:
        while True:
            item = self._queue.get(timeout=5)
            if item is None:
                return
            yield item

    def close(self) -> None:
        self.closed.set()
        self._queue.put(None)


def sse(payload: Any) -> bytes:
    """Encode one ``data:`` frame (objects are JSON-encoded)."""
    body = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {body}\n\n".encode("utf-8")


def openai_chunk(text: str) -> dict:
    return {"choices": [{"delta": {"content": text}}]}


def anthropic_text(text: str) -> dict:
    return {"type": "content_block_delta", "delta": {"type": "text_delta", "text": text}}


def anthropic_thinking(text: str) -> dict:
    return {"type": "content_block_delta", "delta": {"type": "thinking_delta", "thinking": text}}


def make_client(
    responder: Callable[[httpx.Request], httpx.Response],
    requests: Optional[List[httpx.Request]] = None,
) -> httpx.Client:
    """Client whose transport calls ``responder`` (recording requests)."""

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return responder(request)

    return httpx.Client(transport=httpx.MockTransport(handler))


def stream_response(chunks: Iterable[bytes], status: int = 200, fail_with: Optional[Exception] = None):
    """Responder returning the same scripted stream for every request."""

    def responder(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status,
            headers={"content-type": "text/event-stream"},
            stream=ScriptedStream(chunks, fail_with),
        )

    return responder
