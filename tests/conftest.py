"""Top-level pytest configuration and shared fixtures.

Qdrant runs in-process (``location=":memory:"``) and embeddings are a
deterministic keyword model, so no test needs a network service.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from langchain_core.embeddings import Embeddings
from qdrant_client import QdrantClient

from memstore.config.settings import MemStoreSettings
from memstore.persistence.memory_store import QdrantMemoryStore

FAKE_DIMS = 4

# One vector axis per keyword group, after a constant bias axis so that no
# text (including the empty query) embeds to the zero vector.
_KEYWORD_AXES: tuple[tuple[str, ...], ...] = (
    ("cat", "feline", "kitten"),
    ("car", "engine", "vehicle"),
    ("tea", "coffee"),
)


def keyword_vector(text: str) -> list[float]:
    """Embed text by keyword presence."""
    t = str(text).lower()
    return [0.1] + [
        1.0 if any(word in t for word in axis) else 0.0 for axis in _KEYWORD_AXES
    ]


class KeywordEmbeddings(Embeddings):
    """Deterministic stand-in for a LangChain ``Embeddings`` provider."""

    def __init__(self) -> None:
        self.document_calls: list[list[str]] = []
        self.query_calls: list[str] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        return [keyword_vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        return keyword_vector(text)


def pytest_configure(config) -> None:
    """Register custom markers for this test suite."""
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line(
        "markers", "integration: tests wiring settings, client and store together"
    )


@pytest.fixture
def embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture
def qdrant_client() -> Iterator[QdrantClient]:
    client = QdrantClient(location=":memory:")
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def store_settings() -> MemStoreSettings:
    return MemStoreSettings(
        qdrant={"location": ":memory:", "collection": "test_memstore"},
        index={"dims": FAKE_DIMS},
        search={"oversample": 8},
    )


@pytest.fixture
def make_store(qdrant_client, embeddings, store_settings):
    """Factory for stores sharing the test client; extra kwargs go to the index."""

    def _make(**index_overrides: object) -> QdrantMemoryStore:
        index = {"dims": FAKE_DIMS, "embed": embeddings, **index_overrides}
        return QdrantMemoryStore(
            qdrant_client,
            index=index,  # type: ignore[arg-type]
            collection_name="test_memstore",
            cfg=store_settings,
        )

    return _make


@pytest.fixture
def store(make_store) -> Iterator[QdrantMemoryStore]:
    s = make_store()
    try:
        yield s
    finally:
        s.close()
