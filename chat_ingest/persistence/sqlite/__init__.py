"""SQLite persistence backend."""

from .engine import create_connection, db_session, init_schema
from .message_repo import MessageRepoSqlite

__all__ = ["create_connection", "db_session", "init_schema", "MessageRepoSqlite"]
