"""
Immutable per-session provider configuration.

A ``ProviderConfig`` is built once when a session starts and passed explicitly
to the request builder and dialect selector; nothing in the engine reads
provider settings from globals mid-stream.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ...config import get_provider_config
from ...config.defaults import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_SYSTEM_MESSAGE,
    DEFAULT_THINKING_BUDGET_TOKENS,
    HISTORY_LIMIT,
)
from ..routing.hosts import provider_id_from_url


class ProviderConfig(BaseModel):
    """Provider settings for one stream session.

    Attributes:
        provider_id: Normalized provider id; derived from ``base_url`` when blank.
        model: Model identifier sent in the request body.
        base_url: Full endpoint URL the request is posted to.
        api_key: Credential; never logged unmasked.
        system_message: Optional system prompt.
        thinking_enabled: Request reasoning output where the provider supports it.
        thinking_budget_tokens: Reasoning budget sent with ``thinking_enabled``.
        max_tokens: Completion cap for providers that require one.
        web_search: Request search augmentation where supported.
        history_limit: Number of prior turns included in the request.
        extra: Opaque body fields merged last into the request body.
    """

    model_config = ConfigDict(frozen=True)

    provider_id: str = ""
    model: str = Field(min_length=1)
    base_url: str = Field(min_length=1)
    api_key: Optional[str] = None
    system_message: Optional[str] = DEFAULT_SYSTEM_MESSAGE
    thinking_enabled: bool = False
    thinking_budget_tokens: int = Field(default=DEFAULT_THINKING_BUDGET_TOKENS, ge=1024)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    web_search: bool = False
    history_limit: int = Field(default=HISTORY_LIMIT, ge=0)
    extra: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _normalize_provider(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        provider = str(data.get("provider_id") or "").strip().lower()
        if not provider:
            provider = provider_id_from_url(data.get("base_url"))
        return {**data, "provider_id": provider}

    @classmethod
    def from_settings(cls, provider_id: str, **overrides: Any) -> "ProviderConfig":
        """Build a config from defaults, config file and environment.

        ``overrides`` win over every other source; ``None`` values are ignored.
        Unknown keys from the config file are dropped.
        """
        merged = get_provider_config(provider_id, overrides)
        known = {k: v for k, v in merged.items() if k in cls.model_fields}
        known["provider_id"] = provider_id
        return cls(**known)

    def log_fields(self) -> Dict[str, Any]:
        """Fields safe to include in logs (no credentials)."""
        return {
            "provider": self.provider_id,
            "model": self.model,
            "thinking": self.thinking_enabled,
            "web_search": self.web_search,
        }


__all__ = ["ProviderConfig"]
