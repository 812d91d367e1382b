"""Provider id -> streaming dialect selection.

The table is static: a dialect is picked once when a session starts and never
changes mid-stream. Unknown ids fall back to the OpenAI-compatible dialect,
which is logged as ``dialect.fallback``; selection never fails.
"""
from __future__ import annotations

import logging
from typing import Dict

from ...anthropic.stream_helpers import AnthropicDialect
from ...hunyuan.stream_helpers import SearchAugmentedDialect
from ...openai.openai_streaming import OpenAICompatibleDialect
from ..interfaces_parts.stream_dialect import StreamDialect
from ..logging import get_logger, log_event

_logger = get_logger("chat_ingest.routing")

_ANTHROPIC = AnthropicDialect()
_OPENAI = OpenAICompatibleDialect()
_HUNYUAN = SearchAugmentedDialect()

DIALECTS: Dict[str, StreamDialect] = {
    "anthropic": _ANTHROPIC,
    "openai": _OPENAI,
    "deepseek": _OPENAI,
    "qwen": _OPENAI,
    "moonshot": _OPENAI,
    "zhipu": _OPENAI,
    "google": _OPENAI,
    "openrouter": _OPENAI,
    "hunyuan": _HUNYUAN,
}

FALLBACK_DIALECT: StreamDialect = _OPENAI


def select_dialect(provider_id: str) -> StreamDialect:
    """Return the dialect for ``provider_id`` (case and whitespace insensitive)."""
    key = (provider_id or "").strip().lower()
    dialect = DIALECTS.get(key)
    if dialect is not None:
        return dialect
    log_event(
        _logger,
        "dialect.fallback",
        level=logging.WARNING,
        provider=provider_id,
        dialect=FALLBACK_DIALECT.name,
    )
    return FALLBACK_DIALECT


__all__ = ["DIALECTS", "FALLBACK_DIALECT", "select_dialect"]
