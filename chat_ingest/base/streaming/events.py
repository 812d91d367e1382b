"""Canonical stream events produced by every provider dialect.

``DeltaEvent`` is a closed union: dialects may only emit these five types and
the accumulator handles each one explicitly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class TextDelta:
    """Visible reply text, appended in arrival order."""

    text: str


@dataclass(frozen=True)
class ThinkingDelta:
    """Reasoning text, kept in a channel separate from the visible reply."""

    text: str


@dataclass(frozen=True)
class Reference:
    """Citation record; unique per message by ``index``."""

    index: int
    title: str
    url: str

    def render(self) -> str:
        return f"[{self.index}] {self.title}: {self.url}"


@dataclass(frozen=True)
class ErrorEvent:
    """Provider-reported failure. Terminal for the session."""

    message: str
    code: Optional[str] = None


@dataclass(frozen=True)
class Done:
    """Explicit end-of-stream sentinel (distinct from transport EOF)."""


DeltaEvent = Union[TextDelta, ThinkingDelta, Reference, ErrorEvent, Done]

TERMINAL_EVENTS = (ErrorEvent, Done)


def is_terminal(event: DeltaEvent) -> bool:
    return isinstance(event, TERMINAL_EVENTS)


__all__ = [
    "TextDelta",
    "ThinkingDelta",
    "Reference",
    "ErrorEvent",
    "Done",
    "DeltaEvent",
    "TERMINAL_EVENTS",
    "is_terminal",
]
