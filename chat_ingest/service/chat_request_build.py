"""Streaming chat request construction.

``ChatRequestBuilder`` turns a ``ProviderConfig`` plus the conversation turns
into the ``httpx.Request`` a stream session sends. Provider specifics:

- ``anthropic``: ``x-api-key`` and ``anthropic-version`` headers, top-level
  ``system`` field, mandatory ``max_tokens``, optional ``thinking`` block.
- ``hunyuan`` with web search: ``enableEnhancement``, ``citation`` and
  ``search_info`` flags so the stream carries references.
- everything else: bearer token, system prompt as the first message.

Only the last ``history_limit`` prior turns are sent with the current turn.
``config.extra`` is merged into the body last.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Sequence

import httpx

from ..base.dto.chat import ChatMessageDTO
from ..base.dto.provider_config import ProviderConfig
from ..config.defaults import ANTHROPIC_API_VERSION
from ..persistence.interfaces.repos import StoredMessage


def to_messages(stored: Iterable[StoredMessage]) -> List[ChatMessageDTO]:
    """Convert persisted messages into request turns.

    Assistant messages without content (a reply cancelled before any text
    arrived) and messages that ended in error are skipped.
    """
    out: List[ChatMessageDTO] = []
    for m in stored:
        if m.role not in ("user", "assistant"):
            continue
        if m.role == "assistant" and (not m.content or m.status == "error"):
            continue
        out.append(ChatMessageDTO(role=m.role, content=m.content))
    return out


def select_turns(messages: Sequence[ChatMessageDTO], history_limit: int) -> List[ChatMessageDTO]:
    """Keep the last ``history_limit`` prior turns plus the current (last) turn.

    System turns are dropped; the system prompt comes from the config.
    """
    turns = [m for m in messages if m.role != "system"]
    if not turns:
        return []
    *history, current = turns
    kept = history[-history_limit:] if history_limit > 0 else []
    return [*kept, current]


class ChatRequestBuilder:
    """Default ``RequestBuilder`` for the supported chat-completion back ends."""

    def build(self, config: ProviderConfig, messages: Sequence[ChatMessageDTO]) -> httpx.Request:
        turns = select_turns(messages, config.history_limit)
        if not turns:
            raise ValueError("at least one message is required")
        if config.provider_id == "anthropic":
            headers, body = self._anthropic(config, turns)
        else:
            headers, body = self._openai_style(config, turns)
        body.update(config.extra)
        headers["Content-Type"] = "application/json"
        headers["Accept"] = "text/event-stream"
        return httpx.Request(
            "POST",
            config.base_url,
            headers=headers,
            content=json.dumps(body, ensure_ascii=False).encode("utf-8"),
        )

    @staticmethod
    def _anthropic(config: ProviderConfig, turns: List[ChatMessageDTO]) -> tuple[Dict[str, str], Dict[str, Any]]:
        headers = {"anthropic-version": ANTHROPIC_API_VERSION}
        if config.api_key:
            headers["x-api-key"] = config.api_key
        body: Dict[str, Any] = {
            "model": config.model,
            "messages": [t.to_wire() for t in turns],
            "max_tokens": config.max_tokens,
            "stream": True,
        }
        if config.system_message:
            body["system"] = config.system_message
        if config.thinking_enabled:
            body["thinking"] = {"type": "enabled", "budget_tokens": config.thinking_budget_tokens}
        return headers, body

    @staticmethod
    def _openai_style(config: ProviderConfig, turns: List[ChatMessageDTO]) -> tuple[Dict[str, str], Dict[str, Any]]:
        headers: Dict[str, str] = {}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        wire = [t.to_wire() for t in turns]
        if config.system_message:
            wire.insert(0, {"role": "system", "content": config.system_message})
        body: Dict[str, Any] = {"model": config.model, "messages": wire, "stream": True}
        if config.provider_id == "hunyuan" and config.web_search:
            body["enableEnhancement"] = True
            body["citation"] = True
            body["search_info"] = True
        return headers, body


__all__ = ["ChatRequestBuilder", "select_turns", "to_messages"]
