"""Persistence contracts."""

from .repos import IMessageRepository, StoredMessage, UPDATABLE_FIELDS

__all__ = ["IMessageRepository", "StoredMessage", "UPDATABLE_FIELDS"]
