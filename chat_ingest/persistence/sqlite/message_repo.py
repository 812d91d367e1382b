"""SQLite-backed implementation of ``IMessageRepository``.

Writes are executed immediately but only made durable by ``save`` (commit),
so the controller's insert+save and update+save pairs each land as one
transaction.
"""

from __future__ import annotations

import sqlite3
import threading
from typing import Any, List, Optional

from ..interfaces.repos import StoredMessage, check_update_fields, utc_now
from .helpers import MESSAGE_COLUMNS, _format_timestamp, _message_from_row


class MessageRepoSqlite:
    """SQLite message repository.

    The connection may be shared between the caller's thread and a stream
    worker; a re-entrant lock serializes statement execution.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._lock = threading.RLock()

    def insert(self, message: StoredMessage) -> None:
        with self._lock:
            self.conn.execute(
                f"INSERT INTO messages({MESSAGE_COLUMNS}) VALUES(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    message.id,
                    message.conversation_id,
                    message.role,
                    message.content,
                    message.thinking,
                    message.provider_id,
                    message.model_id,
                    message.status,
                    message.error,
                    message.error_code,
                    message.sequence,
                    _format_timestamp(message.created_at),
                    _format_timestamp(message.updated_at),
                ),
            )

    def update(self, message_id: str, **fields: Any) -> StoredMessage:
        """Update ``fields`` on a message; raises ``KeyError`` when it does not exist."""
        check_update_fields(fields)
        columns = sorted(fields)
        assignments = ", ".join(f"{c} = ?" for c in columns + ["updated_at"])
        params = [fields[c] for c in columns] + [_format_timestamp(utc_now()), message_id]
        with self._lock:
            cur = self.conn.execute(f"UPDATE messages SET {assignments} WHERE id = ?", params)  # nosec B608 - columns are whitelisted
            if cur.rowcount == 0:
                raise KeyError(message_id)
            updated = self.get(message_id)
        if updated is None:  # pragma: no cover - row vanished between statements
            raise KeyError(message_id)
        return updated

    def get(self, message_id: str) -> Optional[StoredMessage]:
        with self._lock:
            r = self.conn.execute(
                f"SELECT {MESSAGE_COLUMNS} FROM messages WHERE id = ?", (message_id,)
            ).fetchone()
        return _message_from_row(r) if r else None

    def list_conversation(self, conversation_id: str) -> List[StoredMessage]:
        with self._lock:
            rows = self.conn.execute(
                f"SELECT {MESSAGE_COLUMNS} FROM messages WHERE conversation_id = ? ORDER BY sequence ASC",
                (conversation_id,),
            ).fetchall()
        return [_message_from_row(r) for r in rows]

    def next_sequence(self, conversation_id: str) -> int:
        with self._lock:
            r = self.conn.execute(
                "SELECT MAX(sequence) FROM messages WHERE conversation_id = ?", (conversation_id,)
            ).fetchone()
        return int(r[0]) + 1 if r and r[0] is not None else 0

    def save(self) -> None:
        with self._lock:
            self.conn.commit()


__all__ = ["MessageRepoSqlite"]
