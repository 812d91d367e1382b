"""Row conversion helpers for the SQLite message repository.

All timestamps are normalized to timezone-aware UTC ``datetime`` objects on
read and written as ISO8601 strings.
"""

from __future__ import annotations

from contextlib import suppress
from datetime import datetime, timezone
from typing import Any

from ..interfaces.repos import StoredMessage

MESSAGE_COLUMNS = (
    "id, conversation_id, role, content, thinking, provider_id, model_id, "
    "status, error, error_code, sequence, created_at, updated_at"
)


def _parse_timestamp(raw: Any) -> datetime:
    """Parse a stored timestamp into an aware UTC ``datetime``.

    Naive values are assumed UTC; malformed input maps to the epoch.
    """
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if isinstance(raw, str):
        with suppress(ValueError, TypeError):
            dt = datetime.fromisoformat(raw)
            return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(0, tz=timezone.utc)


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _message_from_row(r: Any) -> StoredMessage:
    """Convert a row selected with ``MESSAGE_COLUMNS`` into a ``StoredMessage``."""
    return StoredMessage(
        id=r[0],
        conversation_id=r[1],
        role=r[2],
        content=r[3] or "",
        thinking=r[4] or "",
        provider_id=r[5],
        model_id=r[6],
        status=r[7],
        error=r[8],
        error_code=r[9],
        sequence=int(r[10]),
        created_at=_parse_timestamp(r[11]),
        updated_at=_parse_timestamp(r[12]),
    )
