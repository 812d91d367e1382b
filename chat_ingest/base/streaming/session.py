"""Stream session lifecycle types."""
from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..cancellation import CancellationToken
from .accumulator import MessageSnapshot


class SessionState(str, Enum):
    """Controller-internal lifecycle of one session.

    IDLE -> REQUESTING -> STREAMING -> FINALIZING -> TERMINATED. REQUESTING may
    jump straight to FINALIZING (HTTP error, transport error, cancel).
    """

    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    TERMINATED = "terminated"


class StreamStatus(str, Enum):
    """Status surfaced to listeners and persisted with the message."""

    IDLE = "idle"
    LOADING = "loading"
    STREAMING = "streaming"
    ERROR = "error"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


_ALLOWED = {
    SessionState.IDLE: {SessionState.REQUESTING, SessionState.FINALIZING},
    SessionState.REQUESTING: {SessionState.STREAMING, SessionState.FINALIZING},
    SessionState.STREAMING: {SessionState.FINALIZING},
    SessionState.FINALIZING: {SessionState.TERMINATED},
    SessionState.TERMINATED: set(),
}


@dataclass(frozen=True)
class StreamUpdate:
    """Observable state pushed to a listener after each change."""

    session_id: str
    conversation_id: str
    message_id: str
    status: StreamStatus
    snapshot: MessageSnapshot


@dataclass
class StreamSession:
    """One active request/response exchange.

    At most one non-terminated session exists per ``conversation_id``.
    """

    conversation_id: str
    provider_id: str
    model_id: str
    message_id: str
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    token: CancellationToken = field(default_factory=CancellationToken)
    started_at: float = field(default_factory=time.time)
    state: SessionState = SessionState.IDLE
    terminated: threading.Event = field(default_factory=threading.Event, repr=False)

    def advance(self, new_state: SessionState) -> None:
        """Move to ``new_state``; illegal transitions raise ``ValueError``."""
        if new_state not in _ALLOWED[self.state]:
            raise ValueError(f"illegal session transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        if new_state is SessionState.TERMINATED:
            self.terminated.set()

    @property
    def active(self) -> bool:
        return self.state is not SessionState.TERMINATED

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the session terminates; ``False`` on timeout."""
        return self.terminated.wait(timeout)


__all__ = ["SessionState", "StreamStatus", "StreamSession", "StreamUpdate"]
