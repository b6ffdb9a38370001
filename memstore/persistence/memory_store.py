"""Qdrant-backed LangGraph BaseStore with semantic search.

Every item is stored as one Qdrant point per chunk of each embedded field:

- ``page_content`` holds the chunk text
- ``metadata`` holds the item value plus the reserved addressing keys
  (``key``, ``namespace``, ``field``, ``chunkIndex``, ``totalChunks``)
- ``namespace_prefixes`` holds every encoded leading namespace prefix so
  searches can be scoped hierarchically with a single keyword match

Exact-key reads and deletes filter on ``metadata.namespace`` together with
``metadata.key`` (the composite key), since keys may contain the namespace
delimiter. Semantic search ranks chunks by cosine similarity and keeps the
best chunk per item. Point ids are deterministic, so re-putting an item
overwrites its chunk set and stale chunks are removed afterwards.
"""

from __future__ import annotations

import asyncio
from collections.abc import Generator, Iterable, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from langgraph.store.base import (
    BaseStore,
    GetOp,
    IndexConfig,
    Item,
    ListNamespacesOp,
    PutOp,
    Result,
    SearchItem,
    SearchOp,
    ensure_embeddings,
)
from loguru import logger
from qdrant_client import QdrantClient
from qdrant_client.http import models as qmodels

from memstore.config.settings import MemStoreSettings, settings
from memstore.persistence.chunking import chunk_text
from memstore.persistence.extraction import extract_texts, tokenize_fields
from memstore.persistence.filters import (
    METADATA_KEY,
    build_value_filter,
    equals_condition,
    metadata_field,
)
from memstore.persistence.langchain_embeddings import get_embeddings
from memstore.persistence.namespaces import (
    chunk_point_id,
    composite_key,
    decode_namespace,
    encode_namespace,
    matches_all,
    namespace_prefixes,
    split_composite_key,
)
from memstore.utils.exceptions import (
    EmbeddingDimensionError,
    MemoryStoreError,
    VectorBackendError,
)
from memstore.utils.monitoring import log_error_with_context, performance_timer
from memstore.utils.qdrant_exceptions import QDRANT_TRANSPORT_EXCEPTIONS
from memstore.utils.storage import create_client, ensure_collection
from memstore.utils.time import ms_to_dt, now_ms

StoreOp = GetOp | PutOp | SearchOp | ListNamespacesOp

PAGE_CONTENT_KEY = "page_content"
PREFIXES_KEY = "namespace_prefixes"
CREATED_AT_KEY = "created_at_ms"
UPDATED_AT_KEY = "updated_at_ms"

KEY_FIELD = metadata_field("key")
NAMESPACE_FIELD = metadata_field("namespace")
PAYLOAD_INDEX_FIELDS = (KEY_FIELD, NAMESPACE_FIELD, PREFIXES_KEY)


class VectorIndexConfig(IndexConfig, total=False):
    """LangGraph index config plus the chunk size bound."""

    max_chunk_size: int


class QdrantMemoryStore(BaseStore):
    """LangGraph BaseStore persisted in a Qdrant collection.

    The Qdrant client and embeddings are injected; use :meth:`from_settings`
    to build both from configuration.
    """

    __slots__ = (
        "_client",
        "_closed",
        "_collection",
        "_cfg",
        "_dims",
        "_max_chunk_size",
        "_owns_client",
        "_ready",
        "_tokenized_fields",
        "embeddings",
        "index_config",
    )

    def __init__(
        self,
        client: QdrantClient,
        *,
        index: VectorIndexConfig,
        collection_name: str | None = None,
        cfg: MemStoreSettings = settings,
        owns_client: bool = False,
    ) -> None:
        """Bind the store to a Qdrant client and collection.

        Args:
            client: Qdrant client used for every backend call.
            index: Embedding configuration (``embed`` is required; ``dims``,
                ``fields`` and ``max_chunk_size`` fall back to settings).
            collection_name: Target collection; defaults to
                ``cfg.qdrant.collection``.
            cfg: Settings used for defaults and search tuning.
            owns_client: Close ``client`` when the store is closed.

        Raises:
            ValueError: If no embedding provider is given or the chunk size
                is smaller than 1.
        """
        self._client = client
        self._cfg = cfg
        self._collection = collection_name or cfg.qdrant.collection
        self._owns_client = owns_client
        self._ready = False
        self._closed = False

        self.embeddings = ensure_embeddings(index.get("embed"))
        self._dims = int(index.get("dims") or cfg.index.dims)
        self._max_chunk_size = int(
            index.get("max_chunk_size") or cfg.index.max_chunk_size
        )
        if self._max_chunk_size < 1:
            raise ValueError(
                f"max_chunk_size must be >= 1, got {self._max_chunk_size}"
            )
        fields = list(index.get("fields") or cfg.index.fields)
        self._tokenized_fields = tokenize_fields(fields)
        self.index_config = VectorIndexConfig(
            **{
                **index,
                "dims": self._dims,
                "fields": [path for path, _ in self._tokenized_fields],
                "max_chunk_size": self._max_chunk_size,
            }
        )

    @classmethod
    def from_settings(
        cls,
        cfg: MemStoreSettings = settings,
        *,
        embeddings: Any | None = None,
    ) -> QdrantMemoryStore:
        """Build a store whose client and embeddings come from settings.

        The returned store owns its client and closes it on :meth:`close`.
        """
        index = VectorIndexConfig(
            **cfg.get_index_config(),
            embed=embeddings if embeddings is not None else get_embeddings(cfg),
        )
        return cls(
            create_client(cfg),
            index=index,
            collection_name=cfg.qdrant.collection,
            cfg=cfg,
            owns_client=True,
        )

    @property
    def collection_name(self) -> str:
        """Name of the backing Qdrant collection."""
        return self._collection

    # Lifecycle
    def ensure_ready(self) -> None:
        """Create the collection and payload indexes on first use.

        Raises:
            EmbeddingDimensionError: If the collection already exists with a
                different vector size.
        """
        if self._ready:
            return
        with self._backend_errors("ensure_collection"):
            ensure_collection(
                self._client,
                self._collection,
                vector_size=self._dims,
                keyword_fields=PAYLOAD_INDEX_FIELDS,
            )
        self._ready = True

    def start(self) -> None:
        """Prepare the backing collection."""
        self.ensure_ready()

    def stop(self) -> None:
        """Release backend resources."""
        self.close()

    def close(self) -> None:
        """Close the Qdrant client if this store owns it.

        Safe to call multiple times.
        """
        if self._closed:
            return
        self._closed = True
        self._ready = False
        if self._owns_client:
            try:
                self._client.close()
            except QDRANT_TRANSPORT_EXCEPTIONS as exc:
                logger.warning("Error closing Qdrant client: {}", exc)

    def __enter__(self) -> QdrantMemoryStore:
        """Return self for context manager use."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object,
    ) -> None:
        """Close the store on context manager exit."""
        self.close()

    # BaseStore API
    def batch(self, ops: Iterable[StoreOp]) -> list[Result]:
        """Execute a batch of store operations sequentially, in order."""
        if self._closed:
            raise MemoryStoreError("Memory store is closed")
        self.ensure_ready()
        results: list[Result] = []
        for op in ops:
            if isinstance(op, GetOp):
                results.append(self._handle_get(op))
            elif isinstance(op, PutOp):
                results.append(self._handle_put(op))
            elif isinstance(op, SearchOp):
                results.append(self._handle_search(op))
            elif isinstance(op, ListNamespacesOp):
                results.append(self._handle_list_namespaces(op))
            else:
                raise TypeError(f"Unsupported op type: {type(op).__name__}")
        return results

    async def abatch(self, ops: Iterable[StoreOp]) -> list[Result]:
        """Execute a batch of store operations asynchronously."""
        return await asyncio.to_thread(self.batch, list(ops))

    # Op handlers
    def _handle_get(self, op: GetOp) -> Item | None:
        encoded_ns = encode_namespace(op.namespace)
        composite = composite_key(op.namespace, op.key)
        records = self._scroll_item(encoded_ns, composite, limit=1)
        if not records:
            return None
        payload = _payload_of(records[0])
        return Item(
            value=dict(payload.get(METADATA_KEY) or {}),
            key=str(op.key),
            namespace=tuple(op.namespace),
            created_at=_payload_dt(payload, CREATED_AT_KEY),
            updated_at=_payload_dt(payload, UPDATED_AT_KEY),
        )

    def _handle_put(self, op: PutOp) -> None:
        encoded_ns = encode_namespace(op.namespace)
        composite = composite_key(op.namespace, op.key)
        if op.value is None:
            self._delete_item(encoded_ns, composite)
            return None
        if op.index is False:
            return None

        to_embed = extract_texts([op], self._tokenized_fields)
        if not to_embed:
            # Every chunk of a previous version is stale.
            self._delete_item(encoded_ns, composite)
            logger.debug("No embeddable text for {}; nothing written", composite)
            return None

        with performance_timer("memory_store.put", key=composite) as metrics:
            now = now_ms()
            created_at = self._existing_created_at(encoded_ns, composite) or now
            prefixes = namespace_prefixes(op.namespace)
            points: list[qmodels.PointStruct] = []
            for text, provenance in to_embed.items():
                chunks = chunk_text(text, self._max_chunk_size)
                vectors = self._embed_documents(chunks)
                for _, _, field_tag in provenance:
                    for i, (chunk, vector) in enumerate(
                        zip(chunks, vectors, strict=True)
                    ):
                        metadata = {
                            **op.value,
                            "key": composite,
                            "namespace": encoded_ns,
                            "field": field_tag,
                            "chunkIndex": i,
                            "totalChunks": len(chunks),
                        }
                        points.append(
                            qmodels.PointStruct(
                                id=chunk_point_id(
                                    encoded_ns, str(op.key), field_tag, i
                                ),
                                vector=vector,
                                payload={
                                    PAGE_CONTENT_KEY: chunk,
                                    METADATA_KEY: metadata,
                                    PREFIXES_KEY: prefixes,
                                    CREATED_AT_KEY: created_at,
                                    UPDATED_AT_KEY: now,
                                },
                            )
                        )
            metrics["points"] = len(points)

            with self._backend_errors("upsert", key=composite, points=len(points)):
                self._client.upsert(
                    collection_name=self._collection, points=points, wait=True
                )
            self._delete_item(encoded_ns, composite, keep_ids=[p.id for p in points])
        return None

    def _handle_search(self, op: SearchOp) -> list[SearchItem]:
        limit = int(op.limit)
        offset = int(op.offset)
        must, must_not = build_value_filter(op.filter)
        if op.namespace_prefix:
            must.insert(
                0,
                equals_condition(PREFIXES_KEY, encode_namespace(op.namespace_prefix)),
            )
        flt = (
            qmodels.Filter(must=must or None, must_not=must_not or None)
            if must or must_not
            else None
        )

        with performance_timer("memory_store.search", limit=limit) as metrics:
            query_vec = self._embed_query(op.query or "")
            fetch = limit + offset + int(self._cfg.search.oversample)
            with self._backend_errors("query_points", limit=fetch):
                response = self._client.query_points(
                    collection_name=self._collection,
                    query=query_vec,
                    query_filter=flt,
                    limit=fetch,
                    with_payload=True,
                    with_vectors=False,
                )

            # Hits arrive best-first; the first chunk seen per item wins.
            best: dict[tuple[str, str], qmodels.ScoredPoint] = {}
            for hit in response.points:
                metadata = _payload_of(hit).get(METADATA_KEY) or {}
                item_id = (
                    str(metadata.get("namespace") or ""),
                    str(metadata.get("key") or hit.id),
                )
                best.setdefault(item_id, hit)
            metrics["hits"] = len(response.points)
            metrics["items"] = len(best)

        return [_search_item(hit) for hit in best.values()][offset : offset + limit]

    def _handle_list_namespaces(self, op: ListNamespacesOp) -> list[tuple[str, ...]]:
        cap = int(self._cfg.search.namespace_scan_cap)
        page_size = int(self._cfg.search.scroll_page_size)
        found: set[tuple[str, ...]] = set()
        scanned = 0
        next_offset: qmodels.ExtendedPointId | None = None

        while scanned < cap:
            with self._backend_errors("scroll", scanned=scanned):
                records, next_offset = self._client.scroll(
                    collection_name=self._collection,
                    limit=min(page_size, cap - scanned),
                    offset=next_offset,
                    with_payload=True,
                    with_vectors=False,
                )
            scanned += len(records)
            for record in records:
                metadata = _payload_of(record).get(METADATA_KEY) or {}
                ns = decode_namespace(metadata.get("namespace"))
                if not ns or not matches_all(ns, op.match_conditions):
                    continue
                found.add(ns[: op.max_depth] if op.max_depth is not None else ns)
            if next_offset is None:
                break
        else:
            if next_offset is not None:
                logger.warning(
                    "Namespace scan cap reached (cap={}); listing may be incomplete",
                    cap,
                )

        namespaces = sorted(found)
        return namespaces[int(op.offset) : int(op.offset) + int(op.limit)]

    # Backend helpers
    @contextmanager
    def _backend_errors(self, operation: str, **context: Any) -> Generator[None]:
        try:
            yield
        except QDRANT_TRANSPORT_EXCEPTIONS as exc:
            log_error_with_context(
                exc, operation, {"collection": self._collection, **context}
            )
            raise VectorBackendError(f"Qdrant {operation} failed: {exc}") from exc

    def _scroll_item(
        self, encoded_ns: str, composite: str, *, limit: int
    ) -> list[qmodels.Record]:
        with self._backend_errors("scroll", key=composite):
            records, _ = self._client.scroll(
                collection_name=self._collection,
                scroll_filter=qmodels.Filter(
                    must=_item_conditions(encoded_ns, composite)
                ),
                limit=limit,
                with_payload=True,
                with_vectors=False,
            )
        return list(records)

    def _existing_created_at(self, encoded_ns: str, composite: str) -> int | None:
        records = self._scroll_item(encoded_ns, composite, limit=1)
        if not records:
            return None
        value = _payload_of(records[0]).get(CREATED_AT_KEY)
        return int(value) if isinstance(value, int | float) else None

    def _delete_item(
        self,
        encoded_ns: str,
        composite: str,
        *,
        keep_ids: Sequence[qmodels.ExtendedPointId] = (),
    ) -> None:
        """Delete every point of an item, except ``keep_ids``."""
        must_not: list[qmodels.Condition] | None = None
        if keep_ids:
            must_not = [qmodels.HasIdCondition(has_id=list(keep_ids))]
        with self._backend_errors("delete", key=composite):
            self._client.delete(
                collection_name=self._collection,
                points_selector=qmodels.FilterSelector(
                    filter=qmodels.Filter(
                        must=_item_conditions(encoded_ns, composite),
                        must_not=must_not,
                    )
                ),
                wait=True,
            )

    # Embedding helpers
    def _check_dims(self, vector: Sequence[float]) -> list[float]:
        if len(vector) != self._dims:
            raise EmbeddingDimensionError(self._dims, len(vector))
        return [float(x) for x in vector]

    def _embed_documents(self, texts: list[str]) -> list[list[float]]:
        try:
            vectors = self.embeddings.embed_documents(texts)
        except Exception as exc:
            log_error_with_context(exc, "embed_documents", {"texts": len(texts)})
            raise
        return [self._check_dims(v) for v in vectors]

    def _embed_query(self, text: str) -> list[float]:
        try:
            vector = self.embeddings.embed_query(text)
        except Exception as exc:
            log_error_with_context(exc, "embed_query", {"chars": len(text)})
            raise
        return self._check_dims(vector)


def _item_conditions(encoded_ns: str, composite: str) -> list[qmodels.Condition]:
    """Exact address of one item: namespace and composite key together."""
    return [
        equals_condition(NAMESPACE_FIELD, encoded_ns),
        equals_condition(KEY_FIELD, composite),
    ]


def _payload_of(point: qmodels.Record | qmodels.ScoredPoint) -> dict[str, Any]:
    payload = getattr(point, "payload", None)
    return payload if isinstance(payload, dict) else {}


def _payload_dt(payload: dict[str, Any], field: str) -> datetime:
    value = payload.get(field)
    ms = int(value) if isinstance(value, int | float) else now_ms()
    return ms_to_dt(ms)


def _search_item(hit: qmodels.ScoredPoint) -> SearchItem:
    payload = _payload_of(hit)
    metadata = dict(payload.get(METADATA_KEY) or {})
    encoded_ns = metadata.get("namespace")
    return SearchItem(
        namespace=decode_namespace(encoded_ns),
        key=split_composite_key(str(metadata.get("key") or ""), encoded_ns),
        value=metadata,
        created_at=_payload_dt(payload, CREATED_AT_KEY),
        updated_at=_payload_dt(payload, UPDATED_AT_KEY),
        score=float(hit.score),
    )


__all__ = [
    "PAYLOAD_INDEX_FIELDS",
    "QdrantMemoryStore",
    "StoreOp",
    "VectorIndexConfig",
]
