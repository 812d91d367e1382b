"""Transport timeout configuration.

The engine imposes no timers of its own; a stalled stream surfaces as an
httpx read timeout on the worker thread. This module centralizes those
transport timeouts so no call site hard-codes a number.

Supported environment variables (all optional, seconds, must be positive):
    CHAT_INGEST_CONNECT_TIMEOUT_SECONDS
    CHAT_INGEST_READ_TIMEOUT_SECONDS
    CHAT_INGEST_WRITE_TIMEOUT_SECONDS
    CHAT_INGEST_POOL_TIMEOUT_SECONDS
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from ..config.defaults import (
    HTTP_CONNECT_TIMEOUT_SECONDS,
    HTTP_POOL_TIMEOUT_SECONDS,
    HTTP_READ_TIMEOUT_SECONDS,
    HTTP_WRITE_TIMEOUT_SECONDS,
)

_ENV_NAMES = (
    "CHAT_INGEST_CONNECT_TIMEOUT_SECONDS",
    "CHAT_INGEST_READ_TIMEOUT_SECONDS",
    "CHAT_INGEST_WRITE_TIMEOUT_SECONDS",
    "CHAT_INGEST_POOL_TIMEOUT_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Normalized transport timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Establishing the TCP/TLS connection.
        read_timeout_seconds: Maximum gap between two received chunks.
        write_timeout_seconds: Sending the request body.
        pool_timeout_seconds: Waiting for a free pooled connection.
    """

    connect_timeout_seconds: float = HTTP_CONNECT_TIMEOUT_SECONDS
    read_timeout_seconds: float = HTTP_READ_TIMEOUT_SECONDS
    write_timeout_seconds: float = HTTP_WRITE_TIMEOUT_SECONDS
    pool_timeout_seconds: float = HTTP_POOL_TIMEOUT_SECONDS

    def to_httpx(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout_seconds,
            read=self.read_timeout_seconds,
            write=self.write_timeout_seconds,
            pool=self.pool_timeout_seconds,
        )


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float, returning ``default`` otherwise."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached ``TimeoutConfig``, refreshed when env changes."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_NAMES[0], HTTP_CONNECT_TIMEOUT_SECONDS),
        read_timeout_seconds=_parse_env_float(_ENV_NAMES[1], HTTP_READ_TIMEOUT_SECONDS),
        write_timeout_seconds=_parse_env_float(_ENV_NAMES[2], HTTP_WRITE_TIMEOUT_SECONDS),
        pool_timeout_seconds=_parse_env_float(_ENV_NAMES[3], HTTP_POOL_TIMEOUT_SECONDS),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
