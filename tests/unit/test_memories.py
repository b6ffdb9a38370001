"""Unit tests for the remember/recall/forget helpers."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from langgraph.store.base import SearchItem

from memstore.memories import forget, format_recalled, recall, remember

pytestmark = pytest.mark.unit


def _hit(value: dict) -> SearchItem:
    now = datetime.now(UTC)
    return SearchItem(
        namespace=("memories",),
        key="k",
        value=value,
        created_at=now,
        updated_at=now,
        score=1.0,
    )


def test_remember_recall_forget(store) -> None:
    tea = remember(store, "I drink green tea every morning")
    car = remember(store, "My car is a blue hatchback")
    assert tea != car

    hits = recall(store, "what does the user drink? tea or coffee")
    assert hits[0].key == tea
    assert hits[0].value["text"] == "I drink green tea every morning"

    forget(store, tea)
    assert store.get(("memories",), tea) is None
    assert [h.key for h in recall(store, "tea")] == [car]


def test_remember_with_explicit_key_and_namespace(store) -> None:
    key = remember(store, "note", namespace=("memories", "u1"), key="fixed")
    assert key == "fixed"
    item = store.get(("memories", "u1"), "fixed")
    assert item is not None
    assert item.value["text"] == "note"


def test_recall_respects_limit(store) -> None:
    for i in range(7):
        remember(store, f"tea fact {i}")
    assert len(recall(store, "tea")) == 5
    assert len(recall(store, "tea", limit=2)) == 2


def test_format_recalled() -> None:
    rendered = format_recalled(
        [_hit({"text": "likes tea"}), _hit({"text": "owns a cat"})]
    )
    assert rendered == "Memory recalled: \nlikes tea\nowns a cat"


def test_format_recalled_without_text() -> None:
    assert format_recalled([]) is None
    assert format_recalled([_hit({"other": 1})]) is None
