"""Persistence layer: the Qdrant store and its encoding helpers."""

from .memory_store import QdrantMemoryStore, VectorIndexConfig

__all__ = [
    "QdrantMemoryStore",
    "VectorIndexConfig",
]
