from __future__ import annotations

from typing import Any

import pytest
from ollama import EmbedResponse

from memstore.config import ollama_client
from memstore.config.ollama_client import get_ollama_client, ollama_embed
from memstore.config.settings import MemStoreSettings

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _clear_client_cache():
    ollama_client._cached_client.cache_clear()
    yield
    ollama_client._cached_client.cache_clear()


def test_client_is_cached_per_host() -> None:
    cfg = MemStoreSettings(embedding={"base_url": "localhost:11434"})
    a = get_ollama_client(cfg)
    assert a is get_ollama_client(cfg)
    other = MemStoreSettings(embedding={"base_url": "http://gpu-box:11434/"})
    assert get_ollama_client(other) is not a


def test_scheme_is_added(monkeypatch) -> None:
    seen: list[tuple[str, float]] = []

    def _fake(host: str, timeout_s: float) -> object:
        seen.append((host, timeout_s))
        return object()

    monkeypatch.setattr(ollama_client, "_cached_client", _fake)
    cfg = MemStoreSettings(
        embedding={"base_url": "localhost:11434/", "request_timeout_seconds": 9}
    )
    get_ollama_client(cfg)
    assert seen == [("http://localhost:11434", 9.0)]


def test_empty_host_raises() -> None:
    cfg = MemStoreSettings(embedding={"base_url": "  "})
    with pytest.raises(ValueError, match="No Ollama host configured"):
        get_ollama_client(cfg)


def test_ollama_embed_passes_model_and_input() -> None:
    calls: list[dict[str, Any]] = []

    class _Client:
        def embed(self, **kwargs: Any) -> EmbedResponse:
            calls.append(kwargs)
            return EmbedResponse(embeddings=[[0.0, 1.0]])

    resp = ollama_embed(
        model="m", inputs=["hi"], client=_Client()  # type: ignore[arg-type]
    )
    assert list(resp.embeddings[0]) == [0.0, 1.0]
    assert calls == [{"model": "m", "input": ["hi"]}]
