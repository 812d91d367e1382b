"""
Pydantic DTO for conversation turns sent to a provider.

Validation either succeeds or raises ``pydantic.ValidationError``; callers
handle it at the edge (CLI or embedding application).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

Role = Literal["system", "user", "assistant"]


class ChatMessageDTO(BaseModel):
    """One conversation turn.

    Rules:
        - ``role`` must be one of ``Role``.
        - ``user`` turns must carry non-blank content. Assistant turns may be
          empty (a cancelled reply persisted before any text arrived).
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    @model_validator(mode="after")
    def _validate_content(self) -> "ChatMessageDTO":
        if self.role == "user" and not self.content.strip():
            raise ValueError("user message content must be non-empty")
        return self

    def to_wire(self) -> dict:
        return {"role": self.role, "content": self.content}


__all__ = ["Role", "ChatMessageDTO"]
