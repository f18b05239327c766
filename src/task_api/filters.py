"""
Filter documents understood by every DocumentRepository.

A filter is a plain dict:

- ``{}`` matches every document
- ``{"field": value}`` matches when the field equals ``value``
- ``{"field": {"$gte": a, "$lte": b}}`` is an inclusive range (either bound optional)
- ``{"$and": [f1, f2, ...]}`` / ``{"$or": [f1, f2, ...]}`` combine sub-filters

Several keys in the same dict are ANDed together.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping

Filter = Dict[str, Any]

RANGE_OPERATORS = ("$gte", "$lte")
_FIELD_NAME = re.compile(r"[a-z][a-z0-9_]*")

MATCH_ALL: Filter = {}


# PUBLIC_INTERFACE
def check_field_name(name: str) -> str:
    """Reject field names that are not plain snake_case identifiers."""
    if not _FIELD_NAME.fullmatch(name):
        raise ValueError(f"Invalid field name in filter: {name!r}")
    return name


# PUBLIC_INTERFACE
def and_(*filters: Filter) -> Filter:
    """AND the given filters together, dropping match-all fragments."""
    parts: List[Filter] = [f for f in filters if f]
    if not parts:
        return {}
    if len(parts) == 1:
        return parts[0]
    return {"$and": parts}


def is_range(condition: Any) -> bool:
    return isinstance(condition, Mapping) and bool(condition) and all(
        key in RANGE_OPERATORS for key in condition
    )


def _matches_range(value: Any, condition: Mapping[str, Any]) -> bool:
    if value is None:
        return False
    try:
        if "$gte" in condition and value < condition["$gte"]:
            return False
        if "$lte" in condition and value > condition["$lte"]:
            return False
    except TypeError:
        return False
    return True


# PUBLIC_INTERFACE
def matches(document: Mapping[str, Any], flt: Filter) -> bool:
    """Evaluate ``flt`` against a single document."""
    for key, condition in flt.items():
        if key == "$and":
            if not all(matches(document, sub) for sub in condition):
                return False
        elif key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif key.startswith("$"):
            raise ValueError(f"Unsupported filter operator: {key}")
        elif is_range(condition):
            if not _matches_range(document.get(key), condition):
                return False
        elif document.get(key) != condition:
            return False
    return True
