"""Watch command - re-render the table whenever notes change."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..config import ViewConfig
from ..trace import ViewTrace
from ..vault.loader import load_vault
from ..view.table import render_view, to_markdown
from ..watcher import run_watch_loop
from .table import emit, find_current, write_in_place


def render_once(
    vault_path: Path,
    config: ViewConfig,
    *,
    note: str | None = None,
    output_format: str = "md",
    in_place: bool = False,
    console: Console | None = None,
) -> bool:
    """Reload the vault and render one pass; returns True when output was produced."""
    console = console or Console(stderr=True)

    vault = load_vault(vault_path)
    current = find_current(vault, note, console)
    view = render_view(vault, config, current, ViewTrace(enabled=config.debug))

    if in_place:
        if current is None:
            console.print(f"Error: note '{note}' not found", style="bold red")
            return False
        return write_in_place(vault.path / current.path, to_markdown(view))

    emit(view, output_format)
    return True


def run_watch(
    vault_path: Path,
    config: ViewConfig,
    *,
    note: str | None = None,
    output_format: str = "md",
    in_place: bool = False,
) -> None:
    """
    Render once, then again after every batch of note changes.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(stderr=True)

    console.print(f"[bold]Watching[/bold] {vault_path}")
    console.print(f"  Subject: {config.subject or note or '(current note)'}")
    console.print(f"  Output: {'in place' if in_place else output_format}")
    console.print()
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    renders = 0

    def render(changed: list[Path]) -> None:
        nonlocal renders
        timestamp = datetime.now().strftime("%H:%M:%S")
        if changed:
            names = ", ".join(p.name for p in changed[:3]) + (" ..." if len(changed) > 3 else "")
            console.print(f"[dim]{timestamp}[/dim] changed: {names}")
        if render_once(
            vault_path, config, note=note, output_format=output_format, in_place=in_place, console=console
        ):
            renders += 1

    render([])
    try:
        run_watch_loop(vault_path, render)
    except KeyboardInterrupt:
        pass
    console.print()
    console.print(f"[bold]Stopped.[/bold] Rendered {renders} times.")
