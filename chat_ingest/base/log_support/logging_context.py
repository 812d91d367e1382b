"""Structured logging context object for stream sessions.

This module defines :class:`LogContext`, a dataclass carrying the fields common
to every engine log event (provider, model, session and message ids). Its
``to_dict`` helper merges the ``extra`` mapping and prunes ``None`` values.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for stream logging events."""

    provider: Optional[str] = None
    model: Optional[str] = None
    session_id: Optional[str] = None
    message_id: Optional[str] = None
    conversation_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}

    def with_fields(self, **changes: Any) -> "LogContext":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)


__all__ = ["LogContext"]
