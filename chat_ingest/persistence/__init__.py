"""Message persistence: protocol, in-memory store and SQLite backend."""

from .in_memory import InMemoryMessageRepository
from .interfaces.repos import IMessageRepository, StoredMessage

__all__ = ["IMessageRepository", "InMemoryMessageRepository", "StoredMessage"]
