"""Unified memstore configuration using Pydantic Settings v2.

Provides a typed, nested configuration model with environment variable
mapping. Prefer nested fields and `MEMSTORE_{SECTION}__{FIELD}` env vars.

Usage:
    from memstore.config.settings import settings
    print(settings.qdrant.collection)
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class QdrantConfig(BaseModel):
    """Vector backend connection configuration."""

    url: str = Field(default="http://localhost:6333")
    location: str | None = Field(
        default=None,
        description="In-process location such as ':memory:'; overrides url",
    )
    collection: str = Field(default="memory")
    timeout: int = Field(default=60, ge=1, le=300)
    api_key: SecretStr | None = Field(default=None)


class EmbeddingConfig(BaseModel):
    """Embedding provider configuration."""

    provider: Literal["ollama"] = Field(default="ollama")
    model_name: str = Field(default="nomic-embed-text")
    base_url: str = Field(default="http://localhost:11434")
    request_timeout_seconds: int = Field(default=60, ge=1, le=600)


class IndexSettings(BaseModel):
    """Which parts of a stored value get embedded, and how."""

    dims: int = Field(default=1536, ge=1, le=65536)
    fields: list[str] = Field(default_factory=lambda: ["$"])
    max_chunk_size: int = Field(default=1000, ge=1)

    @field_validator("fields")
    @classmethod
    def _default_whole_document(cls, value: list[str]) -> list[str]:
        cleaned = [f.strip() for f in value if f and f.strip()]
        return cleaned or ["$"]


class SearchConfig(BaseModel):
    """Read-path tuning knobs."""

    default_limit: int = Field(default=10, ge=1, le=1000)
    # Extra hits fetched so that per-key de-duplication of chunks still
    # fills the requested page.
    oversample: int = Field(default=32, ge=0, le=1024)
    namespace_scan_cap: int = Field(default=10_000, ge=1)
    scroll_page_size: int = Field(default=256, ge=1, le=10_000)


class MemStoreSettings(BaseSettings):
    """memstore configuration with Pydantic Settings V2.

    - Environment variable mapping with MEMSTORE_ prefix
    - Nested configuration models per concern
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MEMSTORE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO"
    )
    log_file: str | None = Field(default=None)

    qdrant: QdrantConfig = Field(default_factory=QdrantConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    index: IndexSettings = Field(default_factory=IndexSettings)
    search: SearchConfig = Field(default_factory=SearchConfig)

    def get_qdrant_client_config(self) -> dict[str, Any]:
        """Return keyword arguments for `QdrantClient(...)`."""
        if self.qdrant.location:
            return {"location": self.qdrant.location}
        config: dict[str, Any] = {
            "url": self.qdrant.url,
            "timeout": self.qdrant.timeout,
        }
        if self.qdrant.api_key is not None:
            config["api_key"] = self.qdrant.api_key.get_secret_value()
        return config

    def get_index_config(self) -> dict[str, Any]:
        """Return the store index config without the embedding provider."""
        return {
            "dims": self.index.dims,
            "fields": list(self.index.fields),
            "max_chunk_size": self.index.max_chunk_size,
        }


# Global settings instance - primary interface for the application
settings = MemStoreSettings()

__all__ = [
    "EmbeddingConfig",
    "IndexSettings",
    "MemStoreSettings",
    "QdrantConfig",
    "SearchConfig",
    "settings",
]
