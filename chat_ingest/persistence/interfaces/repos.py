"""Repository protocol and DTO for persisted chat messages.

The stream controller depends only on ``IMessageRepository``; concrete
implementations live in ``persistence/in_memory.py`` and
``persistence/sqlite/``.

Failure semantics:
- Implementations raise backend exceptions on I/O or integrity failures. The
  finalizer catches them, logs a warning and keeps the in-memory message.
- ``update`` on an unknown id raises ``KeyError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Protocol, runtime_checkable


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StoredMessage:
    """One chat message as persisted.

    Attributes
    ----------
    id: Message identifier (assigned by the caller).
    conversation_id: Owning conversation.
    role: ``"user"`` or ``"assistant"`` (``"system"`` tolerated).
    content: Visible text; for assistant replies this includes rendered references.
    thinking: Flushed reasoning text, empty when none.
    provider_id: Provider that produced the reply.
    model_id: Model that produced the reply.
    status: Final ``StreamStatus`` value or ``"loading"`` for placeholders.
    error: Error message when the stream ended in error.
    error_code: Normalized error code accompanying ``error``.
    sequence: Ordinal within the conversation.
    created_at / updated_at: UTC timestamps.
    """

    id: str
    conversation_id: str
    role: str
    content: str = ""
    thinking: str = ""
    provider_id: Optional[str] = None
    model_id: Optional[str] = None
    status: str = "completed"
    error: Optional[str] = None
    error_code: Optional[str] = None
    sequence: int = 0
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


UPDATABLE_FIELDS = frozenset(
    {"content", "thinking", "provider_id", "model_id", "status", "error", "error_code"}
)


@runtime_checkable
class IMessageRepository(Protocol):
    """Storage for chat messages."""

    def insert(self, message: StoredMessage) -> None:
        """Add a new message."""
        ...

    def update(self, message_id: str, **fields: Any) -> StoredMessage:
        """Change ``fields`` (subset of ``UPDATABLE_FIELDS``) and return the result."""
        ...

    def get(self, message_id: str) -> Optional[StoredMessage]:
        ...

    def list_conversation(self, conversation_id: str) -> List[StoredMessage]:
        """Messages of a conversation ordered by ``sequence``."""
        ...

    def next_sequence(self, conversation_id: str) -> int:
        ...

    def save(self) -> None:
        """Make pending changes durable."""
        ...


def check_update_fields(fields: dict) -> None:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"cannot update fields: {sorted(unknown)}")


__all__ = [
    "StoredMessage",
    "IMessageRepository",
    "UPDATABLE_FIELDS",
    "check_update_fields",
    "utc_now",
]
