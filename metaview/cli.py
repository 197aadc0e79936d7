"""CLI entrypoint for metaview."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import ViewConfig, find_config, load_config


def _auto_detect_vault(start: Path) -> Path | None:
    """Find the vault root (a folder holding .obsidian) by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / ".obsidian").is_dir():
            return p
    return None


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def view_options(func: Callable) -> Callable:
    """Options shared by every command that renders a table."""
    options = [
        click.argument("note", required=False),
        click.option(
            "--subject",
            "-s",
            type=str,
            default=None,
            help="Note name/path or #tag to filter on (defaults to NOTE)",
        ),
        click.option(
            "--column",
            "-c",
            "columns",
            multiple=True,
            help="Promote a metadata field into its own column. Repeatable.",
        ),
        click.option(
            "--exclude-folder",
            "exclude_folders",
            multiple=True,
            help="Folder to leave out of the scan. Repeatable. (default: _utils)",
        ),
        click.option("--exclude-current", is_flag=True, help="Leave NOTE itself out of the scan"),
        click.option("--debug", is_flag=True, help="Trace every pipeline decision to stderr"),
        click.option(
            "--format",
            "output_format",
            type=click.Choice(["md", "json", "rich"]),
            default="md",
            help="Output format",
        ),
        click.option(
            "--in-place",
            is_flag=True,
            help="Write the markdown table into NOTE between metaview markers",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(
    ctx: click.Context,
    subject: str | None,
    columns: tuple[str, ...],
    exclude_folders: tuple[str, ...],
    exclude_current: bool,
    debug: bool,
) -> ViewConfig:
    """Merge .metaview.toml with command-line options; options win."""
    try:
        base = load_config(find_config(ctx.obj["vault"]))
    except ValueError as e:
        raise click.ClickException(f"Invalid config: {e}")

    config = base.merged(
        subject=subject,
        columns=columns or None,
        exclude_folders=exclude_folders or None,
        exclude_current=exclude_current or None,
        debug=debug or None,
    )
    _configure_logging(config.debug)
    return config


@click.group()
@click.version_option(__version__, prog_name="metaview")
@click.option(
    "--vault",
    "-v",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Path to the vault root (defaults to the nearest folder holding .obsidian)",
)
@click.pass_context
def cli(ctx: click.Context, vault: Path | None) -> None:
    """metaview - metadata tables for list items across a vault.

    Finds every list item that mentions a note or carries a tag, strips its
    inline key:: value fields, and tabulates content, related links and metadata.
    """
    ctx.ensure_object(dict)
    if ctx.invoked_subcommand == "snippet":
        return
    if vault is None:
        detected = _auto_detect_vault(Path.cwd())
        if detected is None:
            raise click.ClickException("Vault not found. Pass --vault /path/to/vault or run from inside a vault.")
        vault = detected

    if not vault.exists() or not vault.is_dir():
        raise click.BadParameter(f"Directory '{vault}' does not exist.", param_hint="--vault / -v")

    ctx.obj["vault"] = vault.resolve()


@cli.command()
@view_options
@click.pass_context
def table(
    ctx: click.Context,
    note: str | None,
    subject: str | None,
    columns: tuple[str, ...],
    exclude_folders: tuple[str, ...],
    exclude_current: bool,
    debug: bool,
    output_format: str,
    in_place: bool,
) -> None:
    """Render the list item table for NOTE (or --subject).

    Examples:

        metaview table "Ada Lovelace"

        metaview table --subject "#project" --column status --format rich

        metaview table Meetings --exclude-current --in-place
    """
    from .commands.table import run_table

    config = _build_config(ctx, subject, columns, exclude_folders, exclude_current, debug)
    exit_code = run_table(ctx.obj["vault"], config, note=note, output_format=output_format, in_place=in_place)
    sys.exit(exit_code)


@cli.command()
@view_options
@click.pass_context
def watch(
    ctx: click.Context,
    note: str | None,
    subject: str | None,
    columns: tuple[str, ...],
    exclude_folders: tuple[str, ...],
    exclude_current: bool,
    debug: bool,
    output_format: str,
    in_place: bool,
) -> None:
    """Re-render the table whenever a note changes."""
    from .commands.watch_cmd import run_watch

    config = _build_config(ctx, subject, columns, exclude_folders, exclude_current, debug)
    run_watch(ctx.obj["vault"], config, note=note, output_format=output_format, in_place=in_place)


@cli.command()
@click.argument("message")
@click.option("--prefix", default="", help="Prepended to the clean title in 'full'")
@click.option("--debug", is_flag=True, help="Log parsing steps to stderr")
def snippet(message: str, prefix: str, debug: bool) -> None:
    """Parse a note-creation command like "p;Jane Smith &role=designer".

    Does not need a vault.
    """
    from .commands.snippet import run_snippet

    _configure_logging(debug)
    sys.exit(run_snippet(message, prefix))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
