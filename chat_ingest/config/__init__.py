"""Unified configuration layer for chat_ingest.

Goals
-----
* Centralize defaults (models, endpoint URLs, system messages).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by
       ``CHAT_INGEST_CONFIG_FILE``
    3. Environment variables (e.g. ``OPENAI_MODEL``, ``OPENAI_API_KEY``)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_provider_config(provider: str)``.

Environment Variable Conventions
--------------------------------
<PROVIDER>_MODEL, <PROVIDER>_API_KEY, <PROVIDER>_BASE_URL, <PROVIDER>_SYSTEM_MESSAGE
e.g. ANTHROPIC_MODEL, HUNYUAN_BASE_URL.

External Config File
--------------------
JSON is attempted first; on a decode failure the text is parsed as YAML.
Structure example::

    anthropic:
      model: claude-3-7-sonnet-20250219
      thinking_enabled: true
    hunyuan:
      web_search: true
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    ANTHROPIC_DEFAULT_MODEL,
    DEEPSEEK_DEFAULT_BASE_URL,
    DEEPSEEK_DEFAULT_MODEL,
    GOOGLE_DEFAULT_BASE_URL,
    GOOGLE_DEFAULT_MODEL,
    HUNYUAN_DEFAULT_BASE_URL,
    HUNYUAN_DEFAULT_MODEL,
    MOONSHOT_DEFAULT_BASE_URL,
    MOONSHOT_DEFAULT_MODEL,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
    OPENROUTER_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
    QWEN_DEFAULT_BASE_URL,
    QWEN_DEFAULT_MODEL,
    ZHIPU_DEFAULT_BASE_URL,
    ZHIPU_DEFAULT_MODEL,
)
from .env import CONFIG_FILE_ENV, get_api_key

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "anthropic": {"model": ANTHROPIC_DEFAULT_MODEL, "base_url": ANTHROPIC_DEFAULT_BASE_URL},
    "openai": {"model": OPENAI_DEFAULT_MODEL, "base_url": OPENAI_DEFAULT_BASE_URL},
    "deepseek": {"model": DEEPSEEK_DEFAULT_MODEL, "base_url": DEEPSEEK_DEFAULT_BASE_URL},
    "qwen": {"model": QWEN_DEFAULT_MODEL, "base_url": QWEN_DEFAULT_BASE_URL},
    "hunyuan": {"model": HUNYUAN_DEFAULT_MODEL, "base_url": HUNYUAN_DEFAULT_BASE_URL},
    "moonshot": {"model": MOONSHOT_DEFAULT_MODEL, "base_url": MOONSHOT_DEFAULT_BASE_URL},
    "zhipu": {"model": ZHIPU_DEFAULT_MODEL, "base_url": ZHIPU_DEFAULT_BASE_URL},
    "google": {"model": GOOGLE_DEFAULT_MODEL, "base_url": GOOGLE_DEFAULT_BASE_URL},
    "openrouter": {"model": OPENROUTER_DEFAULT_MODEL, "base_url": OPENROUTER_DEFAULT_BASE_URL},
}


ENV_FIELD_MAP = {
    "model": "MODEL",
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "base_url": "BASE_URL",
    "system_message": "SYSTEM_MESSAGE",
}


_FILE_CACHE: Optional[Dict[str, Any]] = None
_FILE_CACHE_PATH: Optional[str] = None


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE, _FILE_CACHE_PATH  # noqa: PLW0603 - documented module cache
    path = os.getenv(CONFIG_FILE_ENV) or None
    if _FILE_CACHE is not None and _FILE_CACHE_PATH == path:
        return _FILE_CACHE
    data: Any = {}
    if path and Path(path).exists():
        text = Path(path).read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = data
    _FILE_CACHE_PATH = path
    return data


def reset_config_cache() -> None:
    """Drop the cached external config file contents."""
    global _FILE_CACHE, _FILE_CACHE_PATH  # noqa: PLW0603
    _FILE_CACHE = None
    _FILE_CACHE_PATH = None


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = provider.upper()
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val is not None:
            out[field] = val
    if "api_key" not in out:
        if key := get_api_key(provider):
            out["api_key"] = key
    return out


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    ``None`` values in ``overrides`` are ignored.
    """
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}

    cfg |= DEFAULTS.get(name, {})

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("model")


__all__ = [
    "get_provider_config",
    "get_model",
    "reset_config_cache",
    "DEFAULTS",
]
