"""Logging setup and small timing helpers built on Loguru."""

from __future__ import annotations

import sys
import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from loguru import logger


def setup_logging(log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure Loguru sinks.

    Args:
        log_level: Logging level (e.g., "DEBUG", "INFO", "WARNING", "ERROR").
        log_file: Optional log file path for file output.
    """
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_file:
        logger.add(
            log_file,
            level=log_level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | "
            "{name}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="7 days",
            compression="gz",
        )

    logger.info("Logging configured: level={}, file={}", log_level, log_file)


def log_error_with_context(
    error: Exception,
    operation: str,
    context: dict[str, Any] | None = None,
) -> None:
    """Log errors with context information.

    Args:
        error: The exception that was raised
        operation: Name of the operation that failed
        context: Optional context dictionary (keys, counts; never raw values)
    """
    error_context: dict[str, Any] = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error": str(error),
    }
    if context:
        error_context.update(context)
    logger.error("Operation failed {}", error_context)


@contextmanager
def performance_timer(operation: str, **context: Any) -> Generator[dict[str, Any]]:
    """Time a block and log its duration at debug level.

    Yields a mutable dict; callers may add result counts to it.
    """
    start = time.perf_counter()
    metrics: dict[str, Any] = {"operation": operation, **context}
    try:
        yield metrics
    finally:
        metrics["duration_ms"] = round((time.perf_counter() - start) * 1000.0, 2)
        logger.debug(
            "{} completed in {}ms ({})", operation, metrics["duration_ms"], metrics
        )


__all__ = [
    "log_error_with_context",
    "performance_timer",
    "setup_logging",
]
