"""Dict-backed ``IMessageRepository`` for tests and embedding."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional

from .interfaces.repos import StoredMessage, check_update_fields, utc_now


class InMemoryMessageRepository:
    """Thread-safe in-memory message store.

    ``save`` only counts calls; there is nothing to flush. ``save_count`` and
    ``update_count`` let tests assert persistence happened exactly once.
    """

    def __init__(self) -> None:
        self._messages: Dict[str, StoredMessage] = {}
        self._lock = threading.Lock()
        self.save_count = 0
        self.update_count = 0

    def insert(self, message: StoredMessage) -> None:
        with self._lock:
            if message.id in self._messages:
                raise ValueError(f"duplicate message id: {message.id}")
            self._messages[message.id] = replace(message)

    def update(self, message_id: str, **fields: Any) -> StoredMessage:
        check_update_fields(fields)
        with self._lock:
            current = self._messages[message_id]
            updated = replace(current, updated_at=utc_now(), **fields)
            self._messages[message_id] = updated
            self.update_count += 1
            return replace(updated)

    def get(self, message_id: str) -> Optional[StoredMessage]:
        with self._lock:
            msg = self._messages.get(message_id)
            return replace(msg) if msg else None

    def list_conversation(self, conversation_id: str) -> List[StoredMessage]:
        with self._lock:
            rows = [replace(m) for m in self._messages.values() if m.conversation_id == conversation_id]
        return sorted(rows, key=lambda m: m.sequence)

    def next_sequence(self, conversation_id: str) -> int:
        with self._lock:
            seqs = [m.sequence for m in self._messages.values() if m.conversation_id == conversation_id]
        return max(seqs) + 1 if seqs else 0

    def save(self) -> None:
        with self._lock:
            self.save_count += 1


__all__ = ["InMemoryMessageRepository"]
