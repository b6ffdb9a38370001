"""Long-term memory helpers for the conversation layer.

Thin wrappers over any LangGraph ``BaseStore``:
- remember: store a memory text under a fresh key
- recall: semantic search over stored memories
- format_recalled: render recalled memories for a prompt
- forget: delete a memory

Raw memory text is never logged.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from langgraph.store.base import BaseStore, SearchItem
from loguru import logger

MEMORY_NAMESPACE: tuple[str, ...] = ("memories",)
MEMORY_TEXT_FIELD = "text"
RECALL_LIMIT = 5
RECALL_HEADER = "Memory recalled: \n"


def remember(
    store: BaseStore,
    text: str,
    namespace: tuple[str, ...] = MEMORY_NAMESPACE,
    key: str | None = None,
) -> str:
    """Store ``text`` as a memory and return its key."""
    mem_key = key or str(uuid.uuid4())
    store.put(namespace, mem_key, {MEMORY_TEXT_FIELD: str(text)})
    logger.debug("Memory saved: key={} chars={}", mem_key, len(str(text)))
    return mem_key


def recall(
    store: BaseStore,
    query: str,
    namespace: tuple[str, ...] = MEMORY_NAMESPACE,
    limit: int = RECALL_LIMIT,
) -> list[SearchItem]:
    """Return the memories most similar to ``query``, best first."""
    items = store.search(namespace, query=query, limit=limit)
    logger.debug("Memory recall: {} hit(s)", len(items))
    return items


def format_recalled(items: Iterable[SearchItem]) -> str | None:
    """Render recalled memories, one text per line.

    Returns:
        The rendered block, or None when no item carries memory text.
    """
    texts = [
        str(item.value[MEMORY_TEXT_FIELD])
        for item in items
        if item.value.get(MEMORY_TEXT_FIELD)
    ]
    if not texts:
        return None
    return RECALL_HEADER + "\n".join(texts)


def forget(
    store: BaseStore, key: str, namespace: tuple[str, ...] = MEMORY_NAMESPACE
) -> None:
    """Delete a memory; deleting a missing key is a no-op."""
    store.delete(namespace, key)
    logger.debug("Memory deleted: key={}", key)


__all__ = [
    "MEMORY_NAMESPACE",
    "forget",
    "format_recalled",
    "recall",
    "remember",
]
