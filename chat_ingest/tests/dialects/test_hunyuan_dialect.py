"""Tests for the search-augmented (Hunyuan) streaming dialect."""
from __future__ import annotations

import json

from chat_ingest.base.streaming.events import Reference, TextDelta
from chat_ingest.hunyuan import SearchAugmentedDialect

dialect = SearchAugmentedDialect()


def test_text_and_references_in_one_frame():
    payload = json.dumps(
        {
            "choices": [{"delta": {"content": "Answer"}}],
            "search_info": {"search_results": [{"index": 1, "title": "Doc", "url": "https://d.example/1"}]},
        }
    )
    assert dialect.parse(payload) == [  # nosec B101
        TextDelta("Answer"),
        Reference(index=1, title="Doc", url="https://d.example/1"),
    ]


def test_non_delta_content_shape_is_accepted():
    payload = json.dumps({"choices": [{"content": "whole"}]})
    assert dialect.parse(payload) == [TextDelta("whole")]  # nosec B101


def test_malformed_reference_elements_are_skipped_individually():
    payload = json.dumps(
        {
            "search_info": {
                "search_results": [
                    {"index": "2", "title": "str index", "url": "u"},
                    {"index": True, "title": "bool index", "url": "u"},
                    {"index": 3, "title": None, "url": "u"},
                    {"index": 4, "title": "no url"},
                    "not an object",
                    {"index": 5, "title": "Good", "url": "https://g.example"},
                ]
            }
        }
    )
    assert dialect.parse(payload) == [Reference(index=5, title="Good", url="https://g.example")]  # nosec B101


def test_search_info_of_wrong_shape_is_ignored():
    assert dialect.parse(json.dumps({"search_info": {"search_results": {"index": 1}}})) == []  # nosec B101
    assert dialect.parse(json.dumps({"search_info": []})) == []  # nosec B101
