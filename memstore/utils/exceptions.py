"""Exception types raised by the memory store."""

from __future__ import annotations


class MemoryStoreError(Exception):
    """Base class for memory store failures."""


class VectorBackendError(MemoryStoreError):
    """The vector backend could not be reached or rejected a request."""


class EmbeddingDimensionError(MemoryStoreError, ValueError):
    """An embedding vector does not match the configured index width."""

    def __init__(self, expected: int, got: int) -> None:
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {got}"
        )
        self.expected = expected
        self.got = got


__all__ = [
    "EmbeddingDimensionError",
    "MemoryStoreError",
    "VectorBackendError",
]
