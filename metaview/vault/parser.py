"""Markdown parsing utilities for wiki-links, tags, inline fields and list items."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator
from urllib.parse import unquote

from ..models import ListItem, StructuredLink

# Match [[target]], [[target|display]], [[target#section]], ![[embed]]
WIKILINK_PATTERN = re.compile(r"(!)?\[\[([^\]|#]*)(?:#([^\]|]*))?(?:\|([^\]]*))?\]\]")
# [text](target) that is not an image embed
MDLINK_PATTERN = re.compile(r"(?<!!)\[([^\]]*)\]\(([^)\s]+)\)")
# #tag, #tag/sub - must not be preceded by non-whitespace
TAG_PATTERN = re.compile(r"(?<!\S)#([\w/-]+)")

FENCED_CODE_BLOCK = re.compile(r"```[\s\S]*?```|~~~[\s\S]*?~~~")
INLINE_CODE = re.compile(r"`[^`]+`")

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
LIST_ITEM_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)(?P<symbol>[-*+]|\d+[.)])[ \t]+(?:\[(?P<status>.)\][ \t]+)?(?P<text>.*)$"
)
FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")

# Inline fields: [key:: value], (key:: value), and "key:: value" starting a line.
BRACKET_FIELD = re.compile(r"\[([\w-]+)::\s*((?:\[\[[^\]]*\]\]|\[[^\]]*\]\([^)]*\)|[^\[\]])*)\]")
PAREN_FIELD = re.compile(r"\(([\w-]+)::\s*((?:\[\[[^\]]*\]\]|[^()\[\]])*)\)")
LINE_FIELD = re.compile(r"^([\w-]+)::\s*(.*)$")

Resolver = Callable[[str], str]


def _identity_resolver(target: str) -> str:
    target = target.strip()
    return target if not target or "." in target.rsplit("/", 1)[-1] else f"{target}.md"


def strip_code(content: str) -> str:
    """Remove code blocks and inline code to avoid false positives."""
    content = FENCED_CODE_BLOCK.sub("", content)
    return INLINE_CODE.sub("", content)


def _wikilink(match: re.Match[str], resolve: Resolver, here: str) -> StructuredLink:
    embed, target, subpath, alias = match.groups()
    target = target.strip()
    path = resolve(target) if target else here
    display = alias.strip() if alias and alias.strip() else None
    if display is None and target:
        written = target[:-3] if target.lower().endswith(".md") else target
        resolved = path[:-3] if path.lower().endswith(".md") else path
        if written != resolved:
            display = written
    return StructuredLink(
        path=path,
        subpath=subpath.strip() if subpath and subpath.strip() else None,
        display=display,
        embed=bool(embed),
    )


def extract_outlinks(content: str, resolve: Resolver = _identity_resolver, here: str = "") -> list[StructuredLink]:
    """Wiki-links and local markdown links, in order, deduplicated by target."""
    content = strip_code(content)
    found: list[tuple[int, StructuredLink]] = []

    for match in WIKILINK_PATTERN.finditer(content):
        found.append((match.start(), _wikilink(match, resolve, here)))

    for match in MDLINK_PATTERN.finditer(content):
        target = unquote(match.group(2))
        if "://" in target or target.startswith(("#", "mailto:")):
            continue
        target, _, subpath = target.partition("#")
        found.append((match.start(), StructuredLink(path=resolve(target), subpath=subpath or None)))

    seen = set()
    result = []
    for _, link in sorted(found, key=lambda pair: pair[0]):
        key = (link.path.lower(), link.subpath)
        if key not in seen:
            seen.add(key)
            result.append(link)
    return result


def extract_tags(content: str) -> list[str]:
    """Extract "#tag" strings from content, deduplicated in order of appearance."""
    seen = set()
    tags = []
    for tag in TAG_PATTERN.findall(strip_code(content)):
        tag = tag.rstrip("/")
        if not tag or re.fullmatch(r"[\d/]+", tag):
            continue
        if tag.lower() not in seen:
            seen.add(tag.lower())
            tags.append(f"#{tag}")
    return tags


def frontmatter_tags(metadata: dict) -> list[str]:
    """Tags declared in frontmatter as a list or a comma/space separated string."""
    raw = metadata.get("tags")
    if not raw:
        return []
    if isinstance(raw, str):
        raw = re.split(r"[,\s]+", raw)
    if not isinstance(raw, list):
        raw = [raw]
    return [f"#{str(t).strip().lstrip('#')}" for t in raw if t is not None and str(t).strip().lstrip("#")]


def extract_inline_fields(text: str) -> list[tuple[str, str]]:
    """Return (key, raw value) pairs of inline fields, in order of appearance."""
    fields: list[tuple[int, int, str, str]] = []
    offset = 0
    for line in text.split("\n"):
        stripped = line.strip()
        m = LINE_FIELD.match(stripped)
        if m:
            fields.append((offset, 0, m.group(1), m.group(2).strip()))
        else:
            for pattern in (BRACKET_FIELD, PAREN_FIELD):
                for m in pattern.finditer(line):
                    fields.append((offset, m.start(), m.group(1), m.group(2).strip()))
        offset += 1
    fields.sort(key=lambda f: (f[0], f[1]))
    return [(key, value) for _, _, key, value in fields]


def parse_field_value(raw: str, resolve: Resolver = _identity_resolver, here: str = "") -> Any:
    """Turn a raw field value into a link, a list of links, or a trimmed string."""
    raw = raw.strip()
    matches = list(WIKILINK_PATTERN.finditer(raw))
    if matches and not WIKILINK_PATTERN.sub("", raw).replace(",", "").strip():
        links = [_wikilink(m, resolve, here) for m in matches]
        return links[0] if len(links) == 1 else links
    return raw


def collect_fields(text: str, resolve: Resolver = _identity_resolver, here: str = "") -> dict[str, Any]:
    """Inline fields of a text; a key seen more than once collects a list."""
    fields: dict[str, Any] = {}
    for key, raw in extract_inline_fields(text):
        value = parse_field_value(raw, resolve, here)
        if key not in fields:
            fields[key] = value
            continue
        existing = fields[key] if isinstance(fields[key], list) else [fields[key]]
        fields[key] = existing + (value if isinstance(value, list) else [value])
    return fields


@dataclass
class _Draft:
    line: int
    indent: int
    symbol: str
    status: str | None
    section: str | None
    parent: int | None
    lines: list[str] = field(default_factory=list)


def _iter_drafts(body: str) -> Iterator[_Draft]:
    stack: list[_Draft] = []
    current: _Draft | None = None
    section: str | None = None
    in_fence = False

    for i, line in enumerate(body.split("\n")):
        if FENCE_PATTERN.match(line):
            in_fence = not in_fence
            current = None
            continue
        if in_fence:
            continue

        heading = HEADING_PATTERN.match(line)
        if heading:
            section = heading.group(2)
            stack.clear()
            current = None
            continue

        item = LIST_ITEM_PATTERN.match(line)
        if item:
            indent = len(item.group("indent").expandtabs(4))
            while stack and stack[-1].indent >= indent:
                stack.pop()
            current = _Draft(
                line=i,
                indent=indent,
                symbol=item.group("symbol"),
                status=item.group("status"),
                section=section,
                parent=stack[-1].line if stack else None,
                lines=[item.group("text").strip()],
            )
            stack.append(current)
            yield current
            continue

        if not line.strip():
            current = None
            continue

        indent = len(line) - len(line.lstrip())
        if current is not None and indent > current.indent:
            # Continuation line of the item above (wrapped text or a field line)
            current.lines.append(line.strip())
            continue

        # A paragraph ends the list
        current = None
        stack.clear()


def parse_list_items(body: str, path: str, resolve: Resolver = _identity_resolver) -> list[ListItem]:
    """Parse every list item of a note body.

    Line numbers are relative to ``body``. Children are attached to their
    parent's ``children``; every item (nested or not) is in the result.
    """
    items: list[ListItem] = []
    by_line: dict[int, ListItem] = {}

    for draft in list(_iter_drafts(body)):
        text = "\n".join(draft.lines)
        item = ListItem(
            text=text,
            path=path,
            line=draft.line,
            link=StructuredLink(path=path, subpath=draft.section),
            outlinks=extract_outlinks(text, resolve, here=path),
            tags=extract_tags(text),
            fields=collect_fields(text, resolve, here=path),
            line_count=len(draft.lines),
            section=draft.section,
            symbol=draft.symbol,
            task=draft.status is not None,
            status=draft.status,
            parent=draft.parent,
        )
        items.append(item)
        by_line[item.line] = item
        if item.parent is not None and item.parent in by_line:
            by_line[item.parent].children.append(item)

    return items
