"""memstore: a Qdrant-backed LangGraph memory store.

Usage:
    from memstore import QdrantMemoryStore

    with QdrantMemoryStore.from_settings() as store:
        store.put(("memories",), "k1", {"text": "likes tea"})
"""

from memstore.persistence.memory_store import QdrantMemoryStore, VectorIndexConfig
from memstore.utils.exceptions import (
    EmbeddingDimensionError,
    MemoryStoreError,
    VectorBackendError,
)

__all__ = [
    "EmbeddingDimensionError",
    "MemoryStoreError",
    "QdrantMemoryStore",
    "VectorBackendError",
    "VectorIndexConfig",
]
