"""OpenAI-compatible streaming dialect."""

from .openai_streaming import OpenAICompatibleDialect

__all__ = ["OpenAICompatibleDialect"]
