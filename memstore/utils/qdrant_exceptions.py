"""Shared Qdrant exception groups for consistent handling."""

from __future__ import annotations

from grpc import RpcError
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

QDRANT_TRANSPORT_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ResponseHandlingException,
    UnexpectedResponse,
    RpcError,
    ConnectionError,
    TimeoutError,
)

__all__ = [
    "QDRANT_TRANSPORT_EXCEPTIONS",
]
