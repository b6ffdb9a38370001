"""Shared utilities: logging, Qdrant client helpers and error types."""

from .exceptions import EmbeddingDimensionError, MemoryStoreError, VectorBackendError
from .monitoring import log_error_with_context, performance_timer, setup_logging
from .storage import create_client, ensure_collection

__all__ = [
    "EmbeddingDimensionError",
    "MemoryStoreError",
    "VectorBackendError",
    "create_client",
    "ensure_collection",
    "log_error_with_context",
    "performance_timer",
    "setup_logging",
]
