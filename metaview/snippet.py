"""Split a note-creation command like "p;Jane Smith &role=designer".

The part before the first ";" is the trigger, the rest is the title, and
"&key=value" pairs anywhere in the string become metadata.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

PARAM_PATTERN = re.compile(r"&([a-zA-Z0-9_-]+)=([^&\s]+)")

DEFAULT_TRIGGER = "default"


@dataclass(frozen=True)
class TitleSnippet:
    trigger: str = DEFAULT_TRIGGER
    clean: str = ""
    full: str = ""
    rename_to: str = ""
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "trigger": self.trigger,
            "clean": self.clean,
            "full": self.full,
            "renameTo": self.rename_to,
            "metadata": dict(self.metadata),
        }


def parse_title_snippet(msg: Any, prefix: str = "") -> TitleSnippet:
    """Parse a command string into trigger, clean title and metadata."""
    if not isinstance(msg, str):
        logger.debug(f"title snippet input is not a string: {msg!r}")
        return TitleSnippet()

    text = msg.strip()

    metadata: dict[str, str] = {}
    for key, value in PARAM_PATTERN.findall(text):
        metadata[key] = value.strip()
    text = PARAM_PATTERN.sub("", text).strip()

    trigger, _, title = text.partition(";")
    trigger = trigger.strip().lower()
    title = title.strip()
    logger.debug(f"title snippet trigger={trigger!r} clean={title!r} metadata={metadata!r}")

    return TitleSnippet(
        trigger=trigger or DEFAULT_TRIGGER,
        clean=title,
        full=prefix + title,
        rename_to=title,
        metadata=metadata,
    )
