"""SQLite engine helpers for message persistence.

Purpose
-------
Open SQLite connections with consistent PRAGMA settings and ensure the
``messages`` schema exists.

Reliability strategy
--------------------
- ``busy_timeout`` (milliseconds) from ``chat_ingest.config.defaults`` mitigates
  lock contention between the UI thread and a stream worker.
- WAL journaling with NORMAL synchronous mode.
- ``check_same_thread=False``: a connection is opened on the caller's thread
  but finalization happens on the session worker; the repository serializes
  access with its own lock.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ...config.defaults import (
    SQLITE_BUSY_TIMEOUT_MS,
    SQLITE_JOURNAL_MODE,
    SQLITE_SYNCHRONOUS,
)

DEFAULT_DB_PATH = Path("~/.chat_ingest/messages.db")


def get_db_path(db_path: Optional[str] = None) -> Path:
    """Return the database file path (``~`` expanded, not created yet)."""
    return Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH.expanduser()


def create_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a SQLite connection and apply PRAGMA settings.

    The parent directory is created when missing. ``detect_types`` is not used;
    timestamps are stored and parsed as explicit ISO8601 strings.
    """
    path = get_db_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute(f"PRAGMA journal_mode={SQLITE_JOURNAL_MODE};")
    conn.execute(f"PRAGMA synchronous={SQLITE_SYNCHRONOUS};")
    conn.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS};")
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the ``messages`` table and index if missing, then commit."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS messages (
            id TEXT PRIMARY KEY,
            conversation_id TEXT NOT NULL,
            role TEXT NOT NULL,
            content TEXT NOT NULL DEFAULT '',
            thinking TEXT NOT NULL DEFAULT '',
            provider_id TEXT,
            model_id TEXT,
            status TEXT NOT NULL,
            error TEXT,
            error_code TEXT,
            sequence INTEGER NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id, sequence);"
    )
    conn.commit()


@contextmanager
def db_session(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Yield a connection with schema initialized.

    Commits on normal exit, rolls back if the body raises, always closes.
    """
    conn = create_connection(db_path)
    try:
        init_schema(conn)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


__all__ = ["DEFAULT_DB_PATH", "get_db_path", "create_connection", "init_schema", "db_session"]
