"""Canonical identity strings for links and note references."""

from __future__ import annotations

import re
from typing import Any

from ..models import RawLink, StructuredLink

MD_SUFFIX = re.compile(r"\.md$", re.IGNORECASE)


def _normalize_once(value: Any) -> str:
    if isinstance(value, StructuredLink):
        path = value.path
    else:
        raw = value.text if isinstance(value, RawLink) else str(value)
        raw = raw.strip()
        if raw.startswith("[[") and raw.endswith("]]"):
            # [[target#heading|alias]] -> target
            raw = raw[2:-2].split("|")[0].split("#")[0]
        path = raw
    return MD_SUFFIX.sub("", path.strip()).strip().lower()


def normalize(value: Any) -> str:
    """Reduce a link, wikilink or plain name to its identity string.

    "Foo.md", "foo", "[[Foo]]", "[[foo|Alias]]" and StructuredLink("Foo.md")
    all normalize to "foo". Returns "" for empty input.
    """
    if value is None:
        return ""
    current = _normalize_once(value)
    # Repeat until stable so stacked wrappers/suffixes ("[[a.md]].md") collapse.
    while True:
        nxt = _normalize_once(current)
        if nxt == current:
            return current
        current = nxt
