"""Namespace encoding and prefix/suffix matching.

Namespaces are tuples of labels. The vector backend only stores flat payload
values, so a namespace is persisted as its labels joined with ``:`` and an
item is addressed by the composite key ``"<namespace>:<key>"``.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterable, Sequence

from langgraph.store.base import MatchCondition

NS_DELIM = ":"
WILDCARD = "*"


def encode_namespace(namespace: Sequence[str]) -> str:
    """Join namespace labels into the stored string form.

    Raises:
        ValueError: If a label is empty or contains the delimiter.
    """
    parts = tuple(str(p) for p in namespace)
    for label in parts:
        if not label:
            raise ValueError(f"Namespace labels cannot be empty: {parts!r}")
        if NS_DELIM in label:
            raise ValueError(
                f"Namespace labels cannot contain {NS_DELIM!r}: {label!r}"
            )
    return NS_DELIM.join(parts)


def decode_namespace(encoded: str | None) -> tuple[str, ...]:
    """Split a stored namespace string back into labels."""
    if not encoded:
        return ()
    return tuple(encoded.split(NS_DELIM))


def composite_key(namespace: Sequence[str], key: str) -> str:
    """Return the stored ``"<namespace>:<key>"`` form of an item address.

    Keys may contain the delimiter, so ``(("a",), "b:c")`` and
    ``(("a", "b"), "c")`` share a composite key. Exact lookups pair it with
    the encoded namespace.
    """
    return f"{encode_namespace(namespace)}{NS_DELIM}{key}"


def split_composite_key(composite: str, encoded_namespace: str | None) -> str:
    """Recover the item key from a composite key.

    The namespace prefix is stripped when it matches, so keys that contain
    the delimiter survive. Otherwise the text after the last delimiter is used.
    """
    if encoded_namespace:
        prefix = f"{encoded_namespace}{NS_DELIM}"
        if composite.startswith(prefix):
            return composite[len(prefix) :]
    return composite.rsplit(NS_DELIM, 1)[-1]


def namespace_prefixes(namespace: Sequence[str]) -> list[str]:
    """Encoded leading prefixes, used to filter searches hierarchically.

    Example:
        >>> namespace_prefixes(("users", "42", "notes"))
        ['users', 'users:42', 'users:42:notes']
    """
    parts = tuple(namespace)
    return [encode_namespace(parts[: i + 1]) for i in range(len(parts))]


def chunk_point_id(
    encoded_namespace: str, key: str, field_tag: str, chunk_index: int
) -> str:
    """Deterministic point id for one chunk of one field of an item.

    Qdrant only accepts unsigned integers or UUIDs as ids, so the parts are
    hashed into a UUIDv5. Namespace and key are serialized as separate JSON
    items: keys may contain the delimiter, so the composite key alone does
    not identify an item.
    """
    name = "memstore:" + json.dumps(
        [encoded_namespace, str(key), field_tag, int(chunk_index)],
        ensure_ascii=False,
    )
    return str(uuid.uuid5(uuid.NAMESPACE_URL, name))


def match_namespace(namespace: Sequence[str], cond: MatchCondition) -> bool:
    """Check if namespace matches a condition with prefix/suffix matching.

    Supports wildcard matching using '*' to skip individual namespace
    components.
    - Prefix match: namespace must start with condition path (e.g.,
      ('a', 'b', 'c', 'd') matches prefix ('a', '*', 'c'))
    - Suffix match: namespace must end with condition path (e.g.,
      ('x', 'y', 'z') matches suffix ('y', 'z'))

    Args:
        namespace: The namespace to test.
        cond: MatchCondition with match_type ('prefix' or 'suffix') and
            path components.

    Returns:
        True if namespace matches condition, False otherwise.

    Raises:
        ValueError: If the match type is neither 'prefix' nor 'suffix'.
    """
    ns = tuple(namespace)
    path = tuple(cond.path)
    if cond.match_type == "prefix":
        start = 0
    elif cond.match_type == "suffix":
        start = len(ns) - len(path)
    else:
        raise ValueError(f"Unsupported match type: {cond.match_type!r}")

    if len(path) > len(ns):
        return False
    return all(
        p == WILDCARD or ns[start + i] == p for i, p in enumerate(path)
    )


def matches_all(
    namespace: Sequence[str], conditions: Iterable[MatchCondition] | None
) -> bool:
    """AND together every condition; no conditions always matches."""
    return all(match_namespace(namespace, cond) for cond in (conditions or ()))


__all__ = [
    "NS_DELIM",
    "WILDCARD",
    "chunk_point_id",
    "composite_key",
    "decode_namespace",
    "encode_namespace",
    "match_namespace",
    "matches_all",
    "namespace_prefixes",
    "split_composite_key",
]
