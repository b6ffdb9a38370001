"""Ollama SDK client wiring (official ollama-python).

Centralizes host/timeout configuration for the embedding provider.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache

import ollama
from ollama import EmbedResponse

from memstore.config.settings import MemStoreSettings, settings


def _normalize_url(url: str) -> str:
    """Ensure a URL has a scheme.

    Args:
        url: The URL string to normalize.

    Returns:
        URL with http:// prepended if scheme was missing.
    """
    u = (url or "").strip()
    if not u:
        return u
    if "://" not in u:
        return f"http://{u}"
    return u


@lru_cache(maxsize=4)
def _cached_client(host: str, timeout_s: float) -> ollama.Client:
    return ollama.Client(host=host, timeout=timeout_s)


def get_ollama_client(cfg: MemStoreSettings = settings) -> ollama.Client:
    """Return a cached Ollama sync client configured from settings/env.

    Raises:
        ValueError: If no host is configured.
    """
    host = _normalize_url(cfg.embedding.base_url).rstrip("/")
    if not host:
        raise ValueError("No Ollama host configured")
    return _cached_client(host, float(cfg.embedding.request_timeout_seconds))


def ollama_embed(
    *,
    model: str,
    inputs: str | Sequence[str],
    client: ollama.Client | None = None,
    cfg: MemStoreSettings = settings,
) -> EmbedResponse:
    """Call Ollama embed for one or more inputs.

    Args:
        model: Model name.
        inputs: Input string or list of strings.
        client: Optional client override.
        cfg: Application settings.

    Returns:
        Embed response containing vectors.
    """
    c = client or get_ollama_client(cfg)
    return c.embed(model=model, input=inputs)


__all__ = [
    "get_ollama_client",
    "ollama_embed",
]
