"""Vault loading, note lookup and source expressions."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Iterable

import frontmatter

from ..models import Document
from ..view.identity import normalize
from .parser import extract_tags, frontmatter_tags, parse_list_items

logger = logging.getLogger(__name__)

_SOURCE_TERM = re.compile(r'-"((?:[^"\\]|\\.)*)"')
_SOURCE_AND = re.compile(r"\s+AND\s+")


def quote_source(path: str) -> str:
    """Quote a folder or note path for a source expression."""
    escaped = path.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_source_expression(exclude_folders: Iterable[str], exclude_path: str | None = None) -> str:
    """Build ``-"folder" AND -"note.md"``; empty string when nothing is excluded."""
    terms = [f"-{quote_source(folder)}" for folder in exclude_folders if folder]
    if exclude_path:
        terms.append(f"-{quote_source(exclude_path)}")
    return " AND ".join(terms)


def parse_source_expression(expression: str | None) -> list[str]:
    """Return the excluded paths of a source expression built by build_source_expression."""
    expression = (expression or "").strip()
    if not expression:
        return []

    excluded = []
    pos = 0
    while True:
        term = _SOURCE_TERM.match(expression, pos)
        if not term:
            raise ValueError(f"Unsupported source expression near: {expression[pos:]!r}")
        excluded.append(re.sub(r"\\(.)", r"\1", term.group(1)))
        pos = term.end()
        if pos == len(expression):
            return excluded
        sep = _SOURCE_AND.match(expression, pos)
        if not sep:
            raise ValueError(f"Expected AND near: {expression[pos:]!r}")
        pos = sep.end()


def _is_excluded(doc_path: str, excluded: str) -> bool:
    doc = doc_path.lower()
    target = excluded.strip().strip("/").lower()
    if not target:
        return False
    return doc == target or doc == f"{target}.md" or doc.startswith(f"{target}/")


class LinkResolver:
    """Resolve link targets the way Obsidian does: exact path, then shortest path by name."""

    def __init__(self, paths: Iterable[str]):
        self._by_path: dict[str, str] = {}
        self._by_name: dict[str, str] = {}
        for path in sorted(paths, key=lambda p: (len(p), p)):
            self._by_path.setdefault(path.lower(), path)
            stem = PurePosixPath(path).name
            if stem.lower().endswith(".md"):
                stem = stem[:-3]
            self._by_name.setdefault(stem.lower(), path)

    def __call__(self, target: str) -> str:
        target = target.strip().replace("\\", "/")
        if not target:
            return ""
        key = target.lower()
        for candidate in (key, f"{key}.md"):
            if candidate in self._by_path:
                return self._by_path[candidate]
        name = PurePosixPath(key).name
        if name.endswith(".md"):
            name = name[:-3]
        if name in self._by_name:
            return self._by_name[name]
        if "." in PurePosixPath(target).name:
            return target
        return f"{target}.md"


@dataclass
class Vault:
    """Container for all loaded notes."""

    path: Path
    documents: list[Document] = field(default_factory=list)

    # Lookup table built after loading
    _by_id: dict[str, Document] = field(default_factory=dict)

    def __post_init__(self):
        self._build_lookups()

    def _build_lookups(self):
        """Index notes by normalized path and by normalized name (shortest path wins)."""
        self._by_id.clear()
        for doc in sorted(self.documents, key=lambda d: (len(d.path), d.path)):
            self._by_id.setdefault(normalize(doc.path), doc)
        for doc in sorted(self.documents, key=lambda d: (len(d.path), d.path)):
            self._by_id.setdefault(normalize(doc.name), doc)

    def get(self, ref: Any) -> Document | None:
        """Get a note by path, name, wikilink or link object."""
        if isinstance(ref, Document):
            return ref
        identity = normalize(ref)
        return self._by_id.get(identity) if identity else None

    def pages(self, source: str | None = None) -> list[Document]:
        """All notes not excluded by the source expression, in path order."""
        excluded = parse_source_expression(source)
        return [
            doc
            for doc in sorted(self.documents, key=lambda d: d.path)
            if not any(_is_excluded(doc.path, e) for e in excluded)
        ]


def _timestamp(value: float | None) -> datetime | None:
    return datetime.fromtimestamp(value, tz=timezone.utc) if value else None


def load_document(path: Path, vault_path: Path, resolve: LinkResolver | None = None) -> Document:
    """Load a single markdown file with its frontmatter and list items."""
    post = frontmatter.load(path)
    rel = path.relative_to(vault_path).as_posix()
    resolve = resolve or LinkResolver([rel])

    tags = []
    seen = set()
    for tag in frontmatter_tags(post.metadata) + extract_tags(post.content):
        if tag.lower() not in seen:
            seen.add(tag.lower())
            tags.append(tag)

    stat = path.stat()
    return Document(
        path=rel,
        name=path.stem,
        tags=tags,
        frontmatter=dict(post.metadata),
        lists=parse_list_items(post.content, rel, resolve),
        mtime=_timestamp(stat.st_mtime),
        ctime=_timestamp(getattr(stat, "st_birthtime", None) or stat.st_ctime),
    )


def load_vault(vault_path: Path) -> Vault:
    """Load all markdown files from the vault.

    Args:
        vault_path: Path to the vault root

    Returns:
        Vault with every note that could be parsed
    """
    files = [
        md_file
        for md_file in sorted(vault_path.rglob("*.md"))
        # Skip hidden files and directories (.obsidian, .trash)
        if not any(part.startswith(".") for part in md_file.relative_to(vault_path).parts)
    ]
    resolve = LinkResolver(f.relative_to(vault_path).as_posix() for f in files)

    documents = []
    for md_file in files:
        try:
            documents.append(load_document(md_file, vault_path, resolve))
        except Exception as e:
            # Log error but continue loading
            logger.warning(f"Failed to load {md_file}: {e}")

    return Vault(path=vault_path, documents=documents)
