from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterator

import pytest

from chat_ingest.persistence.sqlite import MessageRepoSqlite, create_connection, init_schema


@pytest.fixture()
def conn(tmp_path: Path) -> Iterator[sqlite3.Connection]:
    """File-backed connection with the messages schema applied."""
    connection = create_connection(str(tmp_path / "messages.db"))
    init_schema(connection)
    try:
        yield connection
    finally:
        connection.close()


@pytest.fixture()
def sqlite_repo(conn: sqlite3.Connection) -> MessageRepoSqlite:
    return MessageRepoSqlite(conn)
