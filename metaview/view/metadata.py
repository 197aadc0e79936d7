"""Collect inline metadata of a list item as field -> set of display strings."""

from __future__ import annotations

from typing import Any, Iterable

from ..config import STRUCTURAL_KEYS
from ..models import ListItem

MetadataMap = dict[str, set[str]]


def _as_values(value: Any) -> Iterable[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return value
    return [value]


def extract(item: ListItem, excluded_keys: Iterable[str] = ()) -> MetadataMap:
    """Build the metadata map of a list item.

    Structural keys and ``excluded_keys`` are skipped case-insensitively.
    Values are stringified, trimmed and deduplicated; blank values and
    fields left with no values are dropped.
    """
    excluded = STRUCTURAL_KEYS | {k.lower() for k in excluded_keys}
    metadata: MetadataMap = {}

    for key, value in item.record().items():
        if key.lower() in excluded or value is None or value == "":
            continue
        values = {str(v).strip() for v in _as_values(value) if v is not None}
        values.discard("")
        if values:
            metadata[key] = values

    return metadata
