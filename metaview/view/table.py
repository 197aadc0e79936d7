"""Build the list item table for a subject across the whole vault."""

from __future__ import annotations

import logging
from typing import Any

from ..config import ViewConfig
from ..models import Document, ListItem, Row, TableView
from ..trace import NULL_TRACE, ViewTrace
from ..vault.loader import Vault, build_source_expression
from .cleaner import clean
from .compose import compose, decorate_all, label
from .identity import normalize
from .metadata import MetadataMap, extract
from .relevance import Subject, filtered_links, is_visible

logger = logging.getLogger(__name__)

CONTEXT_NOTICE = "⚠️ Current file context not ready."
EMPTY_NOTICE = "⚠️ No matching list items found for {subject}."


class ViewContextError(RuntimeError):
    """The current note the view depends on is not available."""


def header(config: ViewConfig) -> list[str]:
    return ["Content", *(label(c) for c in config.columns), "Links & Metadata", "Where"]


def resolve_subject(vault: Vault, config: ViewConfig, current: Document | None) -> Subject:
    """Subject from config, defaulting to the current note.

    Note subjects that resolve to a vault note use the note's path as identity
    and its name for matches in item text.
    """
    subject = config.subject or (current.name if current is not None else None)
    if not subject or not subject.strip():
        raise ViewContextError("no subject given and no current note")
    if subject.strip().startswith("#"):
        return Subject.of(subject)
    doc = vault.get(subject)
    if doc is None:
        return Subject.of(subject)
    return Subject.of(subject, normalize(doc.path), normalize(doc.name))


def pop_column(metadata: MetadataMap, column: str) -> set[str]:
    """Remove a field (matched case-insensitively) from metadata and return its values."""
    values: set[str] = set()
    for key in [k for k in metadata if k.lower() == column.lower()]:
        values |= metadata.pop(key)
    return values


def build_row(
    item: ListItem,
    subject: Subject,
    vault: Vault,
    config: ViewConfig,
    trace: ViewTrace = NULL_TRACE,
) -> Row | None:
    """Row for a list item, or None when the item is not about the subject."""
    where = f"{item.path}:{item.line}"
    metadata = extract(item, config.excluded_keys)
    trace.event("metadata", item=where, fields=sorted(metadata))

    visible = is_visible(item, subject)
    trace.event("visibility", item=where, subject=subject.identity, visible=visible)
    if not visible:
        return None

    content = clean(item.text)
    trace.event("cleaned", item=where, content=content)

    links = filtered_links(item, metadata, subject)
    trace.event("links", item=where, kept=[str(link) for link in links])

    promoted = [decorate_all(pop_column(metadata, column), vault.get) for column in config.columns]
    related = compose(links, metadata, vault.get)

    owner = vault.get(item.path)
    return Row(
        cells=(content, *promoted, related, str(item.link)),
        sort_key=owner.freshness if owner is not None else None,
    )


def sort_rows(rows: list[Row]) -> list[Row]:
    """Newest first; rows without a timestamp last; ties keep scan order."""
    return sorted(
        rows,
        key=lambda r: (r.sort_key is not None, r.sort_key.timestamp() if r.sort_key else 0.0),
        reverse=True,
    )


def build_view(
    vault: Vault,
    config: ViewConfig,
    current: Document | None = None,
    trace: ViewTrace | None = None,
) -> TableView:
    """Run one rendering pass.

    Raises:
        ViewContextError: the view needs the current note and none was given
    """
    trace = trace or NULL_TRACE
    if config.exclude_current and current is None:
        raise ViewContextError("exclude_current set but no current note")

    subject = resolve_subject(vault, config, current)
    source = build_source_expression(
        config.exclude_folders,
        current.path if config.exclude_current and current is not None else None,
    )
    trace.event("source", subject=subject.label, expression=source)

    rows = []
    for doc in vault.pages(source):
        for item in doc.lists:
            row = build_row(item, subject, vault, config, trace)
            if row is not None:
                trace.event("row", item=f"{item.path}:{item.line}", cells=row.cells)
                rows.append(row)

    rows = sort_rows(rows)
    trace.event("summary", subject=subject.label, rows=len(rows))

    if not rows:
        return TableView(header=header(config), notice=EMPTY_NOTICE.format(subject=subject.label))
    return TableView(header=header(config), rows=rows)


def render_view(
    vault: Vault,
    config: ViewConfig,
    current: Document | None = None,
    trace: ViewTrace | None = None,
) -> TableView:
    """build_view that reports a missing current note as a notice instead of raising."""
    try:
        return build_view(vault, config, current, trace)
    except ViewContextError as e:
        logger.debug(f"view context not ready: {e}")
        return TableView(header=header(config), notice=CONTEXT_NOTICE)


def _cell(value: str) -> str:
    return value.replace("\n", "<br>").replace("|", "\\|")


def to_markdown(view: TableView) -> str:
    """Markdown pipe table, or the notice as a paragraph."""
    if view.notice:
        return f"{view.notice}\n"
    lines = [
        "| " + " | ".join(_cell(h) for h in view.header) + " |",
        "|" + "---|" * len(view.header),
    ]
    for row in view.rows:
        lines.append("| " + " | ".join(_cell(c) for c in row.cells) + " |")
    return "\n".join(lines) + "\n"


def to_records(view: TableView) -> dict[str, Any]:
    """JSON-ready form of a view."""
    return {
        "header": list(view.header),
        "rows": [
            {
                "cells": list(row.cells),
                "sort_key": row.sort_key.isoformat() if row.sort_key else None,
            }
            for row in view.rows
        ],
        "notice": view.notice,
    }
