"""Line-framing for server-sent-event style response bodies.

The transport hands over bytes at arbitrary boundaries: a JSON object, a
``data:`` marker or even a multi-byte UTF-8 character may be split across two
chunks. ``FrameDemultiplexer`` buffers bytes, cuts complete ``\\n``-terminated
lines, and decodes each complete line on its own, so splits never corrupt a
frame.

Non-success responses are not framed at all; ``parse_error_body`` interprets
the whole body as a single JSON error object.
"""
from __future__ import annotations

import json
from typing import Iterable, Iterator, List, Optional, Union

from ...config.defaults import SSE_DATA_PREFIX, SSE_DONE_SENTINEL
from ..errors import classify_status
from .events import Done, ErrorEvent

Frame = Union[str, Done]


class FrameDemultiplexer:
    """Incremental splitter turning raw byte chunks into frame payloads.

    Parameters
    ----------
    data_prefix:
        Marker a line must start with to count as a frame (``"data:"``).
        Lines without it (``event:`` lines, ``:`` comments, keep-alives) are
        discarded. ``None`` accepts every non-blank line as a payload.

    Once the ``[DONE]`` sentinel has been seen the demultiplexer is closed and
    yields nothing further.
    """

    def __init__(self, data_prefix: Optional[str] = SSE_DATA_PREFIX) -> None:
        self._buffer = bytearray()
        self._prefix = data_prefix
        self._done = False
        self.frames = 0
        self.discarded = 0

    @property
    def done(self) -> bool:
        return self._done

    def feed(self, chunk: bytes) -> List[Frame]:
        """Append ``chunk`` and return the payloads of all completed lines."""
        if self._done or not chunk:
            return []
        self._buffer.extend(chunk)
        out: List[Frame] = []
        while not self._done:
            nl = self._buffer.find(b"\n")
            if nl < 0:
                break
            raw = bytes(self._buffer[:nl])
            del self._buffer[: nl + 1]
            frame = self._frame_from_line(raw)
            if frame is not None:
                out.append(frame)
        return out

    def close(self) -> List[Frame]:
        """Flush an unterminated trailing line at transport EOF."""
        if self._done or not self._buffer:
            self._buffer.clear()
            return []
        raw = bytes(self._buffer)
        self._buffer.clear()
        frame = self._frame_from_line(raw)
        return [frame] if frame is not None else []

    def iter_frames(self, chunks: Iterable[bytes]) -> Iterator[Frame]:
        """Convenience generator over a whole chunk iterable (EOF included)."""
        for chunk in chunks:
            yield from self.feed(chunk)
            if self._done:
                return
        yield from self.close()

    def _frame_from_line(self, raw: bytes) -> Optional[Frame]:
        line = raw.decode("utf-8", errors="replace").rstrip("\r")
        if not line.strip():
            return None
        if self._prefix is not None:
            if not line.startswith(self._prefix):
                self.discarded += 1
                return None
            line = line[len(self._prefix):]
        payload = line.strip()
        if not payload:
            return None
        self.frames += 1
        if payload == SSE_DONE_SENTINEL:
            self._done = True
            self._buffer.clear()
            return Done()
        return payload


def parse_error_body(body: bytes, status: int) -> ErrorEvent:
    """Interpret a non-2xx response body as one error.

    Message precedence: ``error.message``, then top-level ``message``, else the
    raw body text (empty
    for an empty body). The event code is the normalized code for ``status``.
    """
    text = body.decode("utf-8", errors="replace")
    message: Optional[str] = None
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        data = None
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str):
            message = err["message"]
        elif isinstance(data.get("message"), str):
            message = data["message"]
    if message is None:
        message = text.strip()
    return ErrorEvent(message=message, code=classify_status(status).value)


__all__ = ["Frame", "FrameDemultiplexer", "parse_error_body"]
