"""LangChain Embeddings adapters for memstore.

LangGraph stores expect LangChain `Embeddings`. This module bridges the
official Ollama client into that interface and selects the provider from
settings.
"""

from __future__ import annotations

from collections.abc import Sequence

import ollama
from langchain_core.embeddings import Embeddings

from memstore.config.ollama_client import get_ollama_client, ollama_embed
from memstore.config.settings import MemStoreSettings, settings


class OllamaEmbeddings(Embeddings):
    """LangChain Embeddings wrapper around `ollama.Client.embed`."""

    def __init__(
        self,
        model: str,
        *,
        client: ollama.Client | None = None,
        cfg: MemStoreSettings = settings,
    ) -> None:
        self.model = model
        self._client = client
        self._cfg = cfg

    def _get_client(self) -> ollama.Client:
        if self._client is None:
            self._client = get_ollama_client(self._cfg)
        return self._client

    def embed_query(self, text: str) -> list[float]:
        """Embed a single query string into a float vector."""
        return self.embed_documents([text])[0]

    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed a batch of documents into float vectors."""
        batch = [str(t) for t in texts]
        if not batch:
            return []
        response = ollama_embed(
            model=self.model, inputs=batch, client=self._get_client(), cfg=self._cfg
        )
        vecs = list(response.embeddings or [])
        if len(vecs) != len(batch):
            raise RuntimeError(
                f"Ollama returned {len(vecs)} embeddings for {len(batch)} inputs"
            )
        return [[float(x) for x in v] for v in vecs]


def get_embeddings(cfg: MemStoreSettings = settings) -> Embeddings:
    """Return the embedding provider configured in settings.

    Raises:
        ValueError: If the provider is unknown.
    """
    provider = str(cfg.embedding.provider).lower()
    if provider == "ollama":
        return OllamaEmbeddings(cfg.embedding.model_name, cfg=cfg)
    raise ValueError(f"Unknown embedding provider: {cfg.embedding.provider}")


__all__ = [
    "OllamaEmbeddings",
    "get_embeddings",
]
