"""Shared fixtures for the chat_ingest test suite.

Provides a controllable clock, an in-memory repository, provider configs
and structured log capture on the ``chat_ingest`` logger.
"""
from __future__ import annotations

import json
import logging
from typing import Dict, Iterator, List

import pytest

from chat_ingest.base.dto import ProviderConfig
from chat_ingest.base.logging import BASE_LOGGER_NAME, get_logger
from chat_ingest.config import reset_config_cache
from chat_ingest.persistence import InMemoryMessageRepository


class FakeClock:
    """Monotonic clock advanced explicitly by tests."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def repo() -> InMemoryMessageRepository:
    return InMemoryMessageRepository()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep developer config files out of test runs."""
    monkeypatch.delenv("CHAT_INGEST_CONFIG_FILE", raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture()
def make_config():
    """Factory for ``ProviderConfig`` objects with test-friendly defaults."""

    def _make(provider_id: str = "openai", **overrides) -> ProviderConfig:
        data = {
            "provider_id": provider_id,
            "model": "test-model",
            "base_url": f"https://{provider_id or 'unknown'}.test/v1/chat",
            "api_key": "sk-test-key",
        }
        data.update(overrides)
        return ProviderConfig(**data)

    return _make


class _CaptureHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.events: List[Dict] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload = json.loads(record.getMessage())
        except ValueError:
            return
        if isinstance(payload, dict):
            payload["_level"] = record.levelno
            self.events.append(payload)


@pytest.fixture()
def log_capture(monkeypatch: pytest.MonkeyPatch) -> Iterator[List[Dict]]:
    """Collect parsed JSON log events emitted under ``chat_ingest`` (DEBUG and up)."""
    monkeypatch.setenv("CHAT_INGEST_LOG_LEVEL", "DEBUG")
    logger = get_logger(BASE_LOGGER_NAME)
    handler = _CaptureHandler()
    previous = logger.level
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    try:
        yield handler.events
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)
