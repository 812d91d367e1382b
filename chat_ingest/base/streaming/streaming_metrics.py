"""Streaming metrics data structures."""
from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Counters and timings collected for one session.

    Attributes:
        emitted: Content events applied (text, reasoning, references).
        chunks: Raw transport chunks received.
        frames: Frame payloads produced by the demultiplexer.
        skipped_frames: Frames that decoded to no event.
        time_to_first_delta_ms: Latency from request start to first content.
        total_duration_ms: Request start to finalization.
    """

    emitted: int = 0
    chunks: int = 0
    frames: int = 0
    skipped_frames: int = 0
    time_to_first_delta_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    _started: float = field(default_factory=time.perf_counter, repr=False)

    def mark_first_delta(self) -> None:
        if self.time_to_first_delta_ms is None:
            self.time_to_first_delta_ms = round((time.perf_counter() - self._started) * 1000.0, 3)

    def finish(self) -> None:
        self.total_duration_ms = round((time.perf_counter() - self._started) * 1000.0, 3)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("_started", None)
        return data


__all__ = ["StreamMetrics"]
