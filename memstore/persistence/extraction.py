"""Select the text snippets of stored values that get embedded."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from typing import Any

from langgraph.store.base import PutOp, get_text_at_path, tokenize_path

WHOLE_DOCUMENT = "$"

# (namespace, key, field_tag)
Provenance = tuple[tuple[str, ...], str, str]


def tokenize_fields(fields: Sequence[str] | None) -> list[tuple[str, str | list[str]]]:
    """Pair each configured field path with its tokenized form.

    An empty or missing field list means the whole document.
    """
    paths = [f for f in (fields or ()) if f] or [WHOLE_DOCUMENT]
    return [(p, p if p == WHOLE_DOCUMENT else tokenize_path(p)) for p in paths]


def texts_at_path(value: dict[str, Any], tokenized: str | list[str]) -> list[str]:
    """Return the texts a single field path selects from ``value``.

    Missing intermediates and non-container values yield an empty list.
    """
    if tokenized == WHOLE_DOCUMENT:
        return [json.dumps(value, sort_keys=True, ensure_ascii=False)]
    return [t for t in get_text_at_path(value, tokenized) if t is not None]


def extract_texts(
    ops: Iterable[PutOp],
    default_fields: Sequence[tuple[str, str | list[str]]],
) -> dict[str, list[Provenance]]:
    """Group embeddable texts of put operations by their exact string.

    Operations deleting an item (``value is None``) or opting out of indexing
    (``index is False``) contribute nothing. A list in ``op.index`` replaces
    the configured fields for that operation. Empty and whitespace-only texts
    are skipped since they carry nothing to embed; an item whose fields all
    come out blank ends up with no stored points. Skipped texts still count
    towards the occurrence index of later texts at the same path.

    Returns:
        Mapping of text to every ``(namespace, key, field_tag)`` it came from,
        where the tag is ``"<field path>.<occurrence index>"``.
    """
    to_embed: dict[str, list[Provenance]] = {}
    for op in ops:
        if op.value is None or op.index is False:
            continue
        fields = (
            tokenize_fields(op.index) if isinstance(op.index, list) else default_fields
        )
        for path, tokenized in fields:
            for i, text in enumerate(texts_at_path(op.value, tokenized)):
                if not text.strip():
                    continue
                to_embed.setdefault(text, []).append(
                    (tuple(op.namespace), str(op.key), f"{path}.{i}")
                )
    return to_embed


__all__ = [
    "WHOLE_DOCUMENT",
    "Provenance",
    "extract_texts",
    "texts_at_path",
    "tokenize_fields",
]
