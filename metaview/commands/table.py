"""Table command implementation - render list item tables for a subject."""

from __future__ import annotations

import json
import re
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import ViewConfig
from ..models import Document, TableView
from ..trace import ViewTrace
from ..vault.loader import Vault, load_vault
from ..view.table import render_view, to_markdown, to_records

START_MARKER = "<!-- metaview:start -->"
END_MARKER = "<!-- metaview:end -->"

_SPAN = re.compile(r"<span[^>]*>(.*?)</span>")


def run_table(
    vault_path: Path,
    config: ViewConfig,
    *,
    note: str | None = None,
    output_format: str = "md",
    in_place: bool = False,
) -> int:
    """Render the table for a subject and print or write it.

    Args:
        vault_path: Path to the vault root
        config: View configuration, already merged from file and options
        note: The note the table is rendered for (the "current" note)
        output_format: "md", "json" or "rich"
        in_place: Write the markdown into ``note`` between generated markers

    Returns:
        Exit code (0 = success, 1 = note needed for --in-place not found)
    """
    console = Console(stderr=True)

    vault = load_vault(vault_path)
    current = find_current(vault, note, console)

    if in_place and current is None:
        console.print(f"Error: note '{note}' not found", style="bold red")
        return 1

    view = render_view(vault, config, current, ViewTrace(enabled=config.debug))

    if in_place:
        changed = write_in_place(vault.path / current.path, to_markdown(view))
        console.print(f"{'Updated' if changed else 'Unchanged'}: {current.path}", style="green" if changed else "dim")
        return 0

    emit(view, output_format)
    return 0


def find_current(vault: Vault, note: str | None, console: Console | None = None) -> Document | None:
    """Look up the current note; unknown names are reported and yield None."""
    if not note:
        return None
    current = vault.get(note)
    if current is None and console is not None:
        console.print(f"Note '{note}' not found in vault", style="yellow")
    return current


def emit(view: TableView, output_format: str) -> None:
    """Print a view to stdout in the requested format."""
    if output_format == "json":
        print(json.dumps(to_records(view), indent=2, ensure_ascii=False))
    elif output_format == "rich":
        _print_rich(view, Console())
    else:
        print(to_markdown(view), end="")


def _plain(cell: str) -> str:
    return _SPAN.sub(r"\1", cell).replace("<br>", "\n")


def _print_rich(view: TableView, console: Console) -> None:
    if view.notice:
        console.print(view.notice, style="yellow")
        return
    table = Table(show_lines=True)
    for title in view.header:
        table.add_column(title)
    for row in view.rows:
        table.add_row(*(_plain(c) for c in row.cells))
    console.print(table)


def upsert_generated_region(existing: str, generated: str) -> str:
    """Insert or replace the generated region of a note."""
    block = START_MARKER + "\n" + generated.rstrip() + "\n" + END_MARKER
    if START_MARKER in existing and END_MARKER in existing:
        before, rest = existing.split(START_MARKER, 1)
        _, after = rest.split(END_MARKER, 1)
        return before + block + after

    # No region yet: append one at the end of the note.
    return existing.rstrip() + "\n\n" + block + "\n"


def write_in_place(note_path: Path, generated: str) -> bool:
    """Upsert the region into a note; returns False when the note already matches."""
    existing = note_path.read_text(encoding="utf-8")
    updated = upsert_generated_region(existing, generated)
    if updated == existing:
        return False
    note_path.write_text(updated, encoding="utf-8")
    return True
