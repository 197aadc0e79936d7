"""Strip inline key:: value metadata and comment lines from list item text."""

from __future__ import annotations

import re

# Lines dropped outright.
FIELD_LINE = re.compile(r"^[\w-]+::")
COMMENT_PREFIX = "%%"

# Applied in order; later patterns are more general than earlier ones.
TOKEN_PATTERNS = (
    # [key:: [[target]]]
    re.compile(r"\[[\w-]+::\s*\[\[[^\]]+\]\]\]"),
    # (key:: [[target]])
    re.compile(r"\([\w-]+::\s*\[\[[^\]]+\]\]\)"),
    # [key:: see [text](url)]
    re.compile(r"\[[\w-]+::\s*[^\]]*\[[^\]]+\]\([^)]+\)[^\]]*\]"),
    # [key:: value]
    re.compile(r"\[[\w-]+::[^\]]*\]"),
    # (key::value)
    re.compile(r"\([\w-]+::\w+\)"),
    # key:: value
    re.compile(r"\b[\w-]+::\s*[^\s\[]+"),
)

_GAP = "\x00"
# Whitespace around a removed token shrinks to one space; a token with none around it leaves none.
_GAP_RUN = re.compile(r"[ \t]*\x00(?:[ \t]*\x00)*[ \t]*")


def _close_gap(match: re.Match[str]) -> str:
    return " " if match.group().replace(_GAP, "") else ""


def _remove(pattern: re.Pattern[str], line: str) -> str:
    marked = pattern.sub(_GAP, line)
    if marked == line:
        return line
    return _GAP_RUN.sub(_close_gap, marked)


def clean_line(line: str) -> str:
    """Strip one line; returns "" when nothing readable is left."""
    line = line.strip()
    if FIELD_LINE.match(line) or line.startswith(COMMENT_PREFIX):
        return ""
    for pattern in TOKEN_PATTERNS:
        line = _remove(pattern, line)
    return line.strip()


def clean(text: str | None) -> str:
    """Return the human-readable remainder of a list item's text as one line."""
    fragments = [clean_line(line) for line in (text or "").split("\n")]
    return " ".join(f for f in fragments if f)
