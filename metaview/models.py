"""Data models for vault documents, list items and rendered rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union


@dataclass(frozen=True)
class StructuredLink:
    """A link resolved by the vault loader."""

    path: str  # vault-relative, with .md when it points at a note
    subpath: str | None = None  # heading or block reference
    display: str | None = None  # alias text
    embed: bool = False

    def __str__(self) -> str:
        target = self.path[:-3] if self.path.lower().endswith(".md") else self.path
        if self.subpath:
            target += f"#{self.subpath}"
        if self.display:
            target += f"|{self.display}"
        prefix = "!" if self.embed else ""
        return f"{prefix}[[{target}]]"


@dataclass(frozen=True)
class RawLink:
    """A link-like value that only exists as text (plain name or [[wikilink]])."""

    text: str

    def __str__(self) -> str:
        return self.text


LinkRef = Union[StructuredLink, RawLink]


@dataclass
class ListItem:
    """One bullet or task entry of a note."""

    text: str
    path: str  # owning document
    line: int  # 0-based line of the bullet in the note body
    link: StructuredLink
    outlinks: list[StructuredLink] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)  # "#tag" form
    fields: dict[str, Any] = field(default_factory=dict)  # inline key:: value metadata
    line_count: int = 1
    section: str | None = None
    symbol: str = "-"
    task: bool = False
    status: str | None = None  # task box character
    parent: int | None = None  # line of the parent item
    children: list["ListItem"] = field(default_factory=list)

    def record(self) -> dict[str, Any]:
        """Flatten into a host-style record: structural keys plus inline fields."""
        structural: dict[str, Any] = {
            "symbol": self.symbol,
            "link": self.link,
            "text": self.text,
            "outlinks": list(self.outlinks),
            "tags": list(self.tags),
            "section": self.section,
            "children": list(self.children),
            "task": self.task,
            "checked": self.status not in (None, " ") if self.task else None,
            "annotated": bool(self.fields),
            "header": self.section,
            "path": self.path,
            "line": self.line,
            "lineCount": self.line_count,
            "position": {"start": self.line, "end": self.line + self.line_count - 1},
            "list": self.parent if self.parent is not None else self.line,
            "subtasks": [c for c in self.children if c.task],
            "real": True,
            "image": None,
            "parent": self.parent,
            "file": StructuredLink(path=self.path),
        }
        reserved = {k.lower() for k in structural}
        record = {k: v for k, v in self.fields.items() if k.lower() not in reserved}
        record.update(structural)
        return record


@dataclass
class Document:
    """A note in the vault."""

    path: str  # vault-relative POSIX path, e.g. "people/Ada.md"
    name: str  # filename without extension
    tags: list[str] = field(default_factory=list)  # "#tag" form, deduplicated
    frontmatter: dict = field(default_factory=dict)
    lists: list[ListItem] = field(default_factory=list)
    mtime: datetime | None = None
    ctime: datetime | None = None

    @property
    def link(self) -> StructuredLink:
        return StructuredLink(path=self.path)

    @property
    def freshness(self) -> datetime | None:
        """Timestamp used to order rows: modification time, else creation time."""
        return self.mtime or self.ctime


@dataclass(frozen=True)
class Row:
    """One visible list item, ready for display."""

    cells: tuple[str, ...]
    sort_key: datetime | None = None


@dataclass
class TableView:
    """Result of a rendering pass: a table, or a single notice."""

    header: list[str]
    rows: list[Row] = field(default_factory=list)
    notice: str | None = None
