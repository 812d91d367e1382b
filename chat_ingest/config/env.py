"""chat_ingest.config.env
======================

Environment variable names and small parsing helpers shared by the
configuration layer.

Design Notes
------------
- Provider credentials follow ``<PROVIDER>_API_KEY``; the canonical name for
  each known provider is listed in ``ENV_MAP``.
- Engine tunables are read through ``get_engine_settings`` which caches the
  parsed values and refreshes them when the relevant variables change, so
  tests can adjust them with ``monkeypatch.setenv``.
- Helpers never raise on unset or malformed values; they fall back to the
  defaults in ``chat_ingest.config.defaults``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional

from .defaults import CANCEL_JOIN_TIMEOUT_SECONDS, THINKING_FLUSH_INTERVAL_MS

ENV_MAP: Dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "qwen": "QWEN_API_KEY",
    "hunyuan": "HUNYUAN_API_KEY",
    "moonshot": "MOONSHOT_API_KEY",
    "zhipu": "ZHIPU_API_KEY",
    "google": "GOOGLE_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

CONFIG_FILE_ENV = "CHAT_INGEST_CONFIG_FILE"
LOG_LEVEL_ENV = "CHAT_INGEST_LOG_LEVEL"
THINKING_FLUSH_ENV = "CHAT_INGEST_THINKING_FLUSH_MS"
CANCEL_JOIN_ENV = "CHAT_INGEST_CANCEL_JOIN_SECONDS"


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder value.

    Heuristics: contains 'placeholder', 'changeme', or 'example'. The check is
    case-insensitive and ignores surrounding whitespace.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "example" in v


def get_env_var_name(provider: str) -> str:
    """Return the API key variable name for ``provider``.

    Unknown providers get the conventional ``<PROVIDER>_API_KEY`` name.
    """
    name = (provider or "").strip().lower()
    return ENV_MAP.get(name, f"{name.upper()}_API_KEY")


def get_api_key(provider: str) -> Optional[str]:
    """Return the API key for ``provider`` from the environment, or ``None``.

    Placeholder values are treated as unset.
    """
    val = os.getenv(get_env_var_name(provider))
    if not val or is_placeholder(val):
        return None
    return val


def mask_secret(val: Optional[str]) -> str:
    """Return a log-safe rendition of a secret (first four chars kept)."""
    if not val:
        return ""
    if len(val) <= 8:
        return "****"
    return f"{val[:4]}****"


def _parse_env_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


@dataclass(frozen=True)
class EngineSettings:
    """Tunables for the streaming engine.

    Attributes:
        thinking_flush_interval_ms: Minimum gap between reasoning flushes.
        cancel_join_timeout_seconds: How long ``cancel`` waits for a session
            worker to finish finalizing.
    """

    thinking_flush_interval_ms: float = THINKING_FLUSH_INTERVAL_MS
    cancel_join_timeout_seconds: float = CANCEL_JOIN_TIMEOUT_SECONDS

    @property
    def thinking_flush_interval_seconds(self) -> float:
        return self.thinking_flush_interval_ms / 1000.0


_CACHED: Optional[EngineSettings] = None
_ENV_GUARD: Optional[str] = None


def get_engine_settings() -> EngineSettings:
    """Return process-cached engine settings, refreshed when env changes."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join([os.getenv(THINKING_FLUSH_ENV, ""), os.getenv(CANCEL_JOIN_ENV, "")])
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    _CACHED = EngineSettings(
        thinking_flush_interval_ms=_parse_env_number(THINKING_FLUSH_ENV, float(THINKING_FLUSH_INTERVAL_MS)),
        cancel_join_timeout_seconds=_parse_env_number(CANCEL_JOIN_ENV, CANCEL_JOIN_TIMEOUT_SECONDS),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = [
    "ENV_MAP",
    "CONFIG_FILE_ENV",
    "LOG_LEVEL_ENV",
    "THINKING_FLUSH_ENV",
    "CANCEL_JOIN_ENV",
    "EngineSettings",
    "get_engine_settings",
    "get_env_var_name",
    "get_api_key",
    "is_placeholder",
    "mask_secret",
]
