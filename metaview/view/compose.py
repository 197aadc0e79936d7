"""Compose the "Links & Metadata" cell and annotate links with note tags."""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable

from ..models import Document
from .metadata import MetadataMap

LINE_BREAK = "<br>"
MARKDOWN_LINK = re.compile(r"^\[.*\]\(.*\)$")
TAG_SPAN = '<span style="font-size: 0.8em; opacity: 0.7;">{tags}</span>'

Lookup = Callable[[Any], Document | None]


def label(key: str) -> str:
    """Capitalize the first character only: "due-date" -> "Due-date"."""
    return key[:1].upper() + key[1:]


def decorate(value: Any, lookup: Lookup) -> str:
    """Append the tags of the note a value points to, if it has any."""
    raw = str(value)
    if MARKDOWN_LINK.match(raw):
        return raw

    doc = lookup(value)
    if doc is not None and doc.tags:
        return f"{raw} {TAG_SPAN.format(tags=' '.join(doc.tags))}"
    return raw


def decorate_all(values: Iterable[Any], lookup: Lookup) -> str:
    return ", ".join(decorate(v, lookup) for v in sorted(values, key=str))


def metadata_order(metadata: MetadataMap) -> list[str]:
    return sorted((k for k, v in metadata.items() if v), key=lambda k: (k.lower(), k))


def compose(links: list[Any], metadata: MetadataMap, lookup: Lookup) -> str:
    """Links first (one per line), then one "**Field**: a, b" line per field."""
    sections: list[str] = []

    if links:
        sections.append(LINE_BREAK.join(decorate(link, lookup) for link in links))

    for key in metadata_order(metadata):
        sections.append(f"**{label(key)}**: {decorate_all(metadata[key], lookup)}")

    return LINE_BREAK.join(sections)
