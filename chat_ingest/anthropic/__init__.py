"""Anthropic Messages API streaming dialect."""

from .stream_helpers import AnthropicDialect

__all__ = ["AnthropicDialect"]
