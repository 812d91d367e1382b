"""Streaming dialect for search-augmented (Hunyuan) chat completions.

Text follows the OpenAI-compatible shape, with a fallback to the non-delta
``choices[0].content`` some responses use. Independently, any frame may carry
``search_info.search_results``; every well-formed element becomes a
``Reference``. Duplicate indices across frames are resolved by the
accumulator (first one kept).
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..base.streaming.events import DeltaEvent, Reference, TextDelta
from ..base.streaming.streaming_support import decode_payload, delta_content, first_choice


def _reference_from(item: Any) -> Reference | None:
    if not isinstance(item, dict):
        return None
    index, title, url = item.get("index"), item.get("title"), item.get("url")
    # bool is an int subclass; reject it explicitly
    if not isinstance(index, int) or isinstance(index, bool):
        return None
    if not isinstance(title, str) or not isinstance(url, str):
        return None
    return Reference(index=index, title=title, url=url)


def extract_references(data: Dict[str, Any]) -> List[Reference]:
    """Return the well-formed references of a frame, skipping bad elements."""
    info = data.get("search_info")
    if not isinstance(info, dict):
        return []
    results = info.get("search_results")
    if not isinstance(results, list):
        return []
    refs = [_reference_from(item) for item in results]
    return [r for r in refs if r is not None]


class SearchAugmentedDialect:
    """Dialect C: text deltas plus citation records."""

    name = "hunyuan"

    def parse(self, payload: str) -> List[DeltaEvent]:
        data = decode_payload(payload, self.name)
        if data is None:
            return []
        events: List[DeltaEvent] = []
        choice = first_choice(data)
        if choice is not None:
            content = delta_content(choice)
            if content is None and isinstance(choice.get("content"), str):
                content = choice["content"]
            if content:
                events.append(TextDelta(content))
        events.extend(extract_references(data))
        return events


__all__ = ["SearchAugmentedDialect", "extract_references"]
