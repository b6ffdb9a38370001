"""Qdrant client lifecycle and collection bootstrap helpers."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger
from qdrant_client import QdrantClient
from qdrant_client.http import models as qmodels
from qdrant_client.http.exceptions import UnexpectedResponse
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from memstore.config.settings import MemStoreSettings, settings
from memstore.utils.exceptions import EmbeddingDimensionError
from memstore.utils.qdrant_exceptions import QDRANT_TRANSPORT_EXCEPTIONS

# Retry configuration constants
INIT_RETRY_ATTEMPTS = 3
INIT_RETRY_MIN = 1
INIT_RETRY_MAX = 8


def create_client(cfg: MemStoreSettings = settings) -> QdrantClient:
    """Build a sync Qdrant client from settings."""
    config = cfg.get_qdrant_client_config()
    client = QdrantClient(**config)
    logger.debug(
        "Created sync Qdrant client: {}", config.get("url") or config.get("location")
    )
    return client


@retry(
    retry=retry_if_exception_type(QDRANT_TRANSPORT_EXCEPTIONS),
    stop=stop_after_attempt(INIT_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=INIT_RETRY_MIN, max=INIT_RETRY_MAX),
    reraise=True,
)
def ensure_collection(
    client: QdrantClient,
    collection_name: str,
    *,
    vector_size: int,
    keyword_fields: Sequence[str] = (),
) -> bool:
    """Create a cosine collection with keyword payload indexes if missing.

    Returns:
        True when the collection was created by this call.

    Raises:
        EmbeddingDimensionError: If an existing collection stores vectors of
            a different size.
    """
    if client.collection_exists(collection_name):
        _check_vector_size(client, collection_name, vector_size)
        logger.debug("Using existing collection: {}", collection_name)
        return False
    try:
        client.create_collection(
            collection_name=collection_name,
            vectors_config=qmodels.VectorParams(
                size=int(vector_size),
                distance=qmodels.Distance.COSINE,
            ),
        )
    except UnexpectedResponse:
        # Another worker may have created it between the check and the call.
        if client.collection_exists(collection_name):
            _check_vector_size(client, collection_name, vector_size)
            return False
        raise
    for field_name in keyword_fields:
        client.create_payload_index(
            collection_name=collection_name,
            field_name=field_name,
            field_schema=qmodels.PayloadSchemaType.KEYWORD,
        )
    logger.info(
        "Created collection {} (size={}, indexes={})",
        collection_name,
        vector_size,
        list(keyword_fields),
    )
    return True


def _check_vector_size(
    client: QdrantClient, collection_name: str, vector_size: int
) -> None:
    # Named-vector collections expose a dict here and carry no single size.
    vectors = client.get_collection(collection_name).config.params.vectors
    size = getattr(vectors, "size", None)
    if size is not None and int(size) != int(vector_size):
        raise EmbeddingDimensionError(int(vector_size), int(size))


__all__ = [
    "create_client",
    "ensure_collection",
]
