"""Translate store search filters into Qdrant payload conditions.

A store filter maps value field names to either a scalar (equality) or an
operator dict such as ``{"$gte": 5}``. Stored values live under the
``metadata`` payload key, so every field is addressed as ``metadata.<field>``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from qdrant_client.http import models as qmodels

METADATA_KEY = "metadata"


def metadata_field(name: str) -> str:
    """Payload path of a value field."""
    return f"{METADATA_KEY}.{name}"


def _equals(key: str, value: Any) -> qmodels.FieldCondition:
    # MatchValue only covers keyword/integer/bool; floats go through a
    # degenerate range.
    if isinstance(value, float):
        return qmodels.FieldCondition(
            key=key, range=qmodels.Range(gte=value, lte=value)
        )
    return qmodels.FieldCondition(key=key, match=qmodels.MatchValue(value=value))


def _range(bound: str) -> Callable[[str, Any], qmodels.FieldCondition]:
    def _build(key: str, value: Any) -> qmodels.FieldCondition:
        return qmodels.FieldCondition(key=key, range=qmodels.Range(**{bound: value}))

    return _build


_MUST_OPS: dict[str, Callable[[str, Any], qmodels.FieldCondition]] = {
    "$eq": _equals,
    "$gt": _range("gt"),
    "$gte": _range("gte"),
    "$lt": _range("lt"),
    "$lte": _range("lte"),
}


def equals_condition(key: str, value: Any) -> qmodels.FieldCondition:
    """Exact-match condition on a payload key."""
    return _equals(key, value)


def build_value_filter(
    filt: dict[str, Any] | None,
) -> tuple[list[qmodels.Condition], list[qmodels.Condition]]:
    """Convert a store filter into ``(must, must_not)`` condition lists.

    Example:
        >>> must, must_not = build_value_filter({"kind": "fact", "n": {"$gt": 1}})
        >>> len(must), len(must_not)
        (2, 0)

    Raises:
        ValueError: If an operator other than $eq, $ne, $gt, $gte, $lt, $lte
            is used.
    """
    must: list[qmodels.Condition] = []
    must_not: list[qmodels.Condition] = []
    for field_name, clause in (filt or {}).items():
        key = metadata_field(str(field_name))
        if not isinstance(clause, dict):
            if clause is None:
                must.append(
                    qmodels.IsNullCondition(is_null=qmodels.PayloadField(key=key))
                )
            else:
                must.append(_equals(key, clause))
            continue
        for op, value in clause.items():
            if op == "$ne":
                must_not.append(_equals(key, value))
                continue
            handler = _MUST_OPS.get(op)
            if handler is None:
                raise ValueError(f"Unsupported filter operator: {op!r}")
            must.append(handler(key, value))
    return must, must_not


__all__ = [
    "METADATA_KEY",
    "build_value_filter",
    "equals_condition",
    "metadata_field",
]
