"""Integration tests wiring settings, Qdrant client, store and memory helpers."""

from __future__ import annotations

import pytest
from langchain_core.embeddings import Embeddings

from memstore.config.settings import MemStoreSettings
from memstore.memories import forget, format_recalled, recall, remember
from memstore.persistence.memory_store import QdrantMemoryStore

pytestmark = pytest.mark.integration


class _TopicEmbeddings(Embeddings):
    _TOPICS = ("cat", "car", "tea")

    def _vec(self, text: str) -> list[float]:
        t = text.lower()
        return [0.1] + [1.0 if topic in t else 0.0 for topic in self._TOPICS]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._vec(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._vec(text)


@pytest.fixture
def cfg() -> MemStoreSettings:
    return MemStoreSettings(
        qdrant={"location": ":memory:", "collection": "it_memory"},
        index={"dims": 4, "fields": ["text"], "max_chunk_size": 40},
    )


def test_from_settings_end_to_end(cfg: MemStoreSettings) -> None:
    with QdrantMemoryStore.from_settings(cfg, embeddings=_TopicEmbeddings()) as store:
        assert store.collection_name == "it_memory"
        assert store.index_config["fields"] == ["text"]

        cat_key = remember(store, "The user adopted a cat named Miso last spring")
        remember(store, "The user drives an old car to work every day")
        store.put(
            ("memories", "archive"),
            "old",
            {"text": "Archived note about tea ceremonies and tea houses in Kyoto"},
        )

        hits = recall(store, "tell me about the cat")
        assert hits[0].key == cat_key
        rendered = format_recalled(hits[:1])
        assert rendered == (
            "Memory recalled: \nThe user adopted a cat named Miso last spring"
        )

        assert store.list_namespaces(prefix=("memories",)) == [
            ("memories",),
            ("memories", "archive"),
        ]
        assert store.list_namespaces(prefix=("memories",), max_depth=1) == [
            ("memories",)
        ]

        archived = store.search(("memories", "archive"), query="tea")
        assert [h.key for h in archived] == ["old"]
        assert archived[0].value["totalChunks"] == 2

        forget(store, cat_key)
        assert store.get(("memories",), cat_key) is None
        assert all(h.key != cat_key for h in recall(store, "cat"))


def test_store_start_and_stop(cfg: MemStoreSettings) -> None:
    store = QdrantMemoryStore.from_settings(cfg, embeddings=_TopicEmbeddings())
    store.start()
    store.put(("memories",), "k1", {"text": "tea"})
    assert store.get(("memories",), "k1") is not None
    store.stop()
