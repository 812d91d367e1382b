from __future__ import annotations

import json

import pytest

from chat_ingest.base.dto import ChatMessageDTO
from chat_ingest.persistence.interfaces import StoredMessage
from chat_ingest.service.chat_request_build import ChatRequestBuilder, select_turns, to_messages


def _turns(n: int):
    roles = ("user", "assistant")
    return [ChatMessageDTO(role=roles[i % 2], content=f"t{i}") for i in range(n)]


def _body(request):
    return json.loads(request.content.decode("utf-8"))


def test_anthropic_request_shape(make_config):
    cfg = make_config("anthropic", thinking_enabled=True, system_message="be brief")
    request = ChatRequestBuilder().build(cfg, [ChatMessageDTO(role="user", content="hi")])
    assert request.method == "POST" and str(request.url) == cfg.base_url  # nosec B101
    assert request.headers["x-api-key"] == "sk-test-key"  # nosec B101
    assert request.headers["anthropic-version"] == "2023-06-01"  # nosec B101
    assert "authorization" not in request.headers  # nosec B101
    body = _body(request)
    assert body["stream"] is True and body["system"] == "be brief"  # nosec B101
    assert body["max_tokens"] == 20000  # nosec B101
    assert body["thinking"] == {"type": "enabled", "budget_tokens": 16000}  # nosec B101
    assert body["messages"] == [{"role": "user", "content": "hi"}]  # nosec B101


def test_openai_style_request_shape(make_config):
    request = ChatRequestBuilder().build(make_config("deepseek"), [ChatMessageDTO(role="user", content="hi")])
    assert request.headers["authorization"] == "Bearer sk-test-key"  # nosec B101
    assert request.headers["accept"] == "text/event-stream"  # nosec B101
    body = _body(request)
    assert body["messages"][0]["role"] == "system"  # nosec B101
    assert "thinking" not in body and "enableEnhancement" not in body  # nosec B101


def test_hunyuan_search_flags(make_config):
    body = _body(ChatRequestBuilder().build(make_config("hunyuan", web_search=True), _turns(1)))
    assert body["enableEnhancement"] and body["citation"] and body["search_info"]  # nosec B101
    body = _body(ChatRequestBuilder().build(make_config("hunyuan"), _turns(1)))
    assert "citation" not in body  # nosec B101


def test_history_is_limited_and_extra_merged(make_config):
    cfg = make_config("openai", system_message=None, history_limit=2, extra={"temperature": 0.2})
    body = _body(ChatRequestBuilder().build(cfg, _turns(7)))
    assert [m["content"] for m in body["messages"]] == ["t4", "t5", "t6"]  # nosec B101
    assert body["temperature"] == 0.2  # nosec B101


def test_missing_key_sends_no_credentials(make_config):
    request = ChatRequestBuilder().build(make_config("openai", api_key=None), _turns(1))
    assert "authorization" not in request.headers  # nosec B101


def test_no_turns_is_rejected(make_config):
    with pytest.raises(ValueError):
        ChatRequestBuilder().build(make_config("openai"), [ChatMessageDTO(role="system", content="x")])


def test_select_turns_zero_history():
    assert [t.content for t in select_turns(_turns(5), 0)] == ["t4"]  # nosec B101


def test_to_messages_skips_failed_and_empty_replies():
    stored = [
        StoredMessage(id="1", conversation_id="c", role="user", content="q1"),
        StoredMessage(id="2", conversation_id="c", role="assistant", content="", status="cancelled"),
        StoredMessage(id="3", conversation_id="c", role="assistant", content="half", status="error"),
        StoredMessage(id="4", conversation_id="c", role="assistant", content="a", status="completed"),
        StoredMessage(id="5", conversation_id="c", role="system", content="s"),
    ]
    assert [m.content for m in to_messages(stored)] == ["q1", "a"]  # nosec B101
