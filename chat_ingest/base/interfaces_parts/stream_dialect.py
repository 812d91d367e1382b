"""StreamDialect Protocol (single-class module).

Defines the contract every provider wire dialect implements.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from ..streaming.events import DeltaEvent


@runtime_checkable
class StreamDialect(Protocol):
    """Translate one frame payload into canonical events.

    Implementations are stateless and must not raise on malformed input:
    payloads that are not the expected JSON shape yield an empty list.
    """

    @property
    def name(self) -> str:
        """Dialect identifier used in logs (e.g. ``"anthropic"``)."""
        ...

    def parse(self, payload: str) -> List[DeltaEvent]:
        """Return the events carried by one frame payload (possibly none)."""
        ...
