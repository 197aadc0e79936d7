"""View configuration and the optional .metaview.toml file."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

CONFIG_FILENAME = ".metaview.toml"

# Keys every list item record carries; never shown as metadata.
STRUCTURAL_KEYS = frozenset(
    {
        "symbol",
        "link",
        "text",
        "outlinks",
        "tags",
        "section",
        "children",
        "task",
        "checked",
        "annotated",
        "header",
        "path",
        "line",
        "linecount",
        "position",
        "list",
        "subtasks",
        "real",
        "image",
        "parent",
        "file",
    }
)

DEFAULT_EXCLUDE_FOLDERS = ("_utils",)


@dataclass(frozen=True)
class ViewConfig:
    """Everything a rendering pass needs to know, built once at the boundary."""

    subject: str | None = None  # note identity or "#tag"; None = current note
    columns: tuple[str, ...] = ()
    exclude_folders: tuple[str, ...] = DEFAULT_EXCLUDE_FOLDERS
    exclude_current: bool = False
    hide_keys: frozenset[str] = frozenset()
    debug: bool = False

    @property
    def excluded_keys(self) -> frozenset[str]:
        """Lowercased keys never collected as metadata."""
        return STRUCTURAL_KEYS | {k.lower() for k in self.hide_keys}

    def merged(self, **overrides: Any) -> "ViewConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        for key in ("columns", "exclude_folders"):
            if key in changes:
                changes[key] = tuple(changes[key])
        if "hide_keys" in changes:
            changes["hide_keys"] = frozenset(changes["hide_keys"])
        return replace(self, **changes)


def _string_list(data: dict[str, Any], key: str) -> tuple[str, ...] | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{key} must be a string or a list of strings")
    return tuple(v.strip() for v in value if v.strip())


def _bool(data: dict[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false")
    return value


def load_config(path: Path) -> ViewConfig:
    """Load a ViewConfig from TOML; a missing file yields the defaults."""
    if not path.exists():
        return ViewConfig()

    import tomllib

    data = tomllib.loads(path.read_text(encoding="utf-8"))

    subject = data.get("subject")
    if subject is not None and not isinstance(subject, str):
        raise ValueError("subject must be a string")

    return ViewConfig().merged(
        subject=(subject.strip() or None) if subject else None,
        columns=_string_list(data, "columns"),
        exclude_folders=_string_list(data, "exclude_folders"),
        exclude_current=_bool(data, "exclude_current"),
        hide_keys=_string_list(data, "hide_keys"),
        debug=_bool(data, "debug"),
    )


def find_config(vault_path: Path) -> Path:
    return vault_path / CONFIG_FILENAME
