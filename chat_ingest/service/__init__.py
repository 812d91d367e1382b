"""Outer layer: request building and the debugging CLI."""

from .chat_request_build import ChatRequestBuilder, select_turns, to_messages

__all__ = ["ChatRequestBuilder", "select_turns", "to_messages"]
