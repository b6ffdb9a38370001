from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from ollama import EmbedResponse

from memstore.config.settings import MemStoreSettings
from memstore.persistence.langchain_embeddings import OllamaEmbeddings, get_embeddings

pytestmark = pytest.mark.unit


class _FakeClient:
    def __init__(self, dims: int = 3, drop: int = 0) -> None:
        self.embed_calls: list[dict[str, Any]] = []
        self._dims = dims
        self._drop = drop

    def embed(self, *_, **kwargs: Any) -> EmbedResponse:
        self.embed_calls.append(kwargs)
        inputs = kwargs["input"]
        count = max(0, len(inputs) - self._drop)
        return EmbedResponse(embeddings=[[1, 0, 0][: self._dims]] * count)


def test_embed_documents_batches_one_call() -> None:
    fake = _FakeClient()
    emb = OllamaEmbeddings("nomic-embed-text", client=fake)  # type: ignore[arg-type]
    out = emb.embed_documents(["a", "b"])
    assert out == [[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]]
    assert all(isinstance(x, float) for x in out[0])
    assert fake.embed_calls == [{"model": "nomic-embed-text", "input": ["a", "b"]}]


def test_embed_query_returns_single_vector() -> None:
    fake = _FakeClient()
    emb = OllamaEmbeddings("m", client=fake)  # type: ignore[arg-type]
    assert emb.embed_query("hello") == [1.0, 0.0, 0.0]
    assert fake.embed_calls[-1]["input"] == ["hello"]


def test_empty_batch_skips_backend() -> None:
    fake = _FakeClient()
    emb = OllamaEmbeddings("m", client=fake)  # type: ignore[arg-type]
    assert emb.embed_documents([]) == []
    assert fake.embed_calls == []


def test_count_mismatch_raises() -> None:
    emb = OllamaEmbeddings("m", client=_FakeClient(drop=1))  # type: ignore[arg-type]
    with pytest.raises(RuntimeError, match="returned 1 embeddings for 2 inputs"):
        emb.embed_documents(["a", "b"])


def test_get_embeddings_uses_configured_model() -> None:
    cfg = MemStoreSettings(embedding={"model_name": "mxbai-embed-large"})
    emb = get_embeddings(cfg)
    assert isinstance(emb, OllamaEmbeddings)
    assert emb.model == "mxbai-embed-large"


def test_get_embeddings_unknown_provider() -> None:
    cfg = SimpleNamespace(embedding=SimpleNamespace(provider="openai"))
    with pytest.raises(ValueError, match="Unknown embedding provider"):
        get_embeddings(cfg)  # type: ignore[arg-type]
