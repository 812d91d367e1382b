"""Validated data transfer objects crossing the engine boundary."""

from .chat import ChatMessageDTO, Role
from .provider_config import ProviderConfig

__all__ = ["ChatMessageDTO", "Role", "ProviderConfig"]
