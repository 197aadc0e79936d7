"""Snippet command - parse a note-creation command string."""

from __future__ import annotations

import json

from ..snippet import parse_title_snippet


def run_snippet(message: str, prefix: str = "") -> int:
    """Print the parsed snippet as JSON."""
    snippet = parse_title_snippet(message, prefix)
    print(json.dumps(snippet.to_dict(), indent=2, ensure_ascii=False))
    return 0
