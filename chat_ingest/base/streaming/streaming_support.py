"""Small helpers shared by the provider dialects."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from ..logging import get_logger, log_event

_logger = get_logger("chat_ingest.dialects")


def decode_payload(payload: str, dialect: str) -> Optional[Dict[str, Any]]:
    """Parse a frame payload as a JSON object.

    Anything else (malformed or too deeply nested JSON, arrays, scalars) is
    logged at debug as ``stream.decode_skip`` and returns ``None``.
    """
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError):
        data = None
    if isinstance(data, dict):
        return data
    log_event(_logger, "stream.decode_skip", level=logging.DEBUG, dialect=dialect, payload=payload[:200])
    return None


def first_choice(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Return ``choices[0]`` when it is an object."""
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        return choices[0]
    return None


def delta_content(choice: Dict[str, Any]) -> Optional[str]:
    """Return ``choice.delta.content`` when it is a string."""
    delta = choice.get("delta")
    if isinstance(delta, dict) and isinstance(delta.get("content"), str):
        return delta["content"]
    return None


__all__ = ["decode_payload", "first_choice", "delta_content"]
