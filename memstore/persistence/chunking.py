"""Word-boundary text chunking for embedding inputs."""

from __future__ import annotations

import re

from loguru import logger

# ASCII whitespace only; no locale-dependent splitting.
_WORD_SPLIT = re.compile(r"[ \t\n\r\f\v]+")


def chunk_text(text: str, max_size: int) -> list[str]:
    """Split ``text`` into chunks of at most ``max_size`` characters.

    Text that already fits is returned unchanged. Longer text is split on
    whitespace and words are packed greedily, so each chunk is the joined
    words of one run separated by single spaces. A single word longer than
    ``max_size`` is never broken and becomes its own oversized chunk.

    Example:
        >>> chunk_text("the quick brown fox", 10)
        ['the quick', 'brown fox']

    Raises:
        ValueError: If ``max_size`` is smaller than 1.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be >= 1, got {max_size}")
    if len(text) <= max_size:
        return [text]

    chunks: list[str] = []
    current = ""
    for word in _WORD_SPLIT.split(text):
        if not word:
            continue
        if current and len(current) + 1 + len(word) > max_size:
            chunks.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word
        if len(word) > max_size:
            logger.debug(
                "Word of {} chars exceeds max chunk size {}; kept whole",
                len(word),
                max_size,
            )
    if current:
        chunks.append(current)
    return chunks


__all__ = ["chunk_text"]
