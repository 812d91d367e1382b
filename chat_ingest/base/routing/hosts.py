"""Provider id inference from endpoint URLs.

Chat shells often store only an endpoint URL per conversation; this maps the
URL host to the provider ids understood by the dialect selector.
"""
from __future__ import annotations

from typing import Tuple
from urllib.parse import urlparse

UNKNOWN_PROVIDER = "unknown"

# Host suffix -> provider id. Checked in order; first match wins.
HOST_PROVIDERS: Tuple[Tuple[str, str], ...] = (
    ("anthropic.com", "anthropic"),
    ("openai.com", "openai"),
    ("deepseek.com", "deepseek"),
    ("dashscope.aliyuncs.com", "qwen"),
    ("hunyuan.cloud.tencent.com", "hunyuan"),
    ("moonshot.cn", "moonshot"),
    ("bigmodel.cn", "zhipu"),
    ("googleapis.com", "google"),
    ("openrouter.ai", "openrouter"),
)


def provider_id_from_url(url: str | None) -> str:
    """Return the provider id for an endpoint URL, or ``"unknown"``."""
    if not url:
        return UNKNOWN_PROVIDER
    host = (urlparse(url).hostname or "").lower()
    for suffix, provider in HOST_PROVIDERS:
        if host == suffix or host.endswith("." + suffix):
            return provider
    return UNKNOWN_PROVIDER


__all__ = ["provider_id_from_url", "HOST_PROVIDERS", "UNKNOWN_PROVIDER"]
