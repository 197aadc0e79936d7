"""Tests for the debounced vault watcher and single render passes."""

import time
from pathlib import Path

from watchdog.events import FileCreatedEvent, FileDeletedEvent, FileModifiedEvent, FileMovedEvent

from conftest import write_note
from metaview.commands.watch_cmd import render_once
from metaview.config import ViewConfig
from metaview.watcher import VaultChangeHandler, compute_file_hash


def _handler(vault_path: Path) -> tuple[VaultChangeHandler, list[list[Path]]]:
    batches: list[list[Path]] = []
    handler = VaultChangeHandler(vault_path, batches.append)
    handler.prime()
    return handler, batches


def test_changes_are_reported_after_debounce(vault_path: Path) -> None:
    note = write_note(vault_path, "Log.md", "- one\n")
    handler, batches = _handler(vault_path)

    note.write_text("- one\n- two\n", encoding="utf-8")
    handler.on_modified(FileModifiedEvent(str(note)))

    assert handler.flush_pending(now=time.time()) == []
    assert handler.flush_pending(now=time.time() + 2) == [note]
    assert batches == [[note]]
    assert handler.pending == {}


def test_unchanged_content_is_ignored(vault_path: Path) -> None:
    note = write_note(vault_path, "Log.md", "- one\n")
    handler, batches = _handler(vault_path)

    handler.on_modified(FileModifiedEvent(str(note)))

    assert handler.flush_pending(now=time.time() + 2) == []
    assert batches == []


def test_hidden_and_non_markdown_paths_are_ignored(vault_path: Path) -> None:
    handler, _ = _handler(vault_path)

    handler.on_created(FileCreatedEvent(str(vault_path / ".obsidian" / "workspace.md")))
    handler.on_created(FileCreatedEvent(str(vault_path / "image.png")))

    assert handler.pending == {}


def test_deleted_and_moved_notes_are_reported(vault_path: Path) -> None:
    gone = write_note(vault_path, "Gone.md", "- bye\n")
    old = write_note(vault_path, "Old.md", "- moving\n")
    handler, batches = _handler(vault_path)

    gone.unlink()
    new = old.rename(vault_path / "New.md")
    handler.on_deleted(FileDeletedEvent(str(gone)))
    handler.on_moved(FileMovedEvent(str(old), str(new)))

    changed = handler.flush_pending(now=time.time() + 2)

    assert set(changed) == {gone, old, new}
    assert str(gone) not in handler.file_hashes
    assert handler.file_hashes[str(new)] == compute_file_hash(new)
    assert len(batches) == 1


def test_render_once_prints_table(meeting_vault, vault_path: Path, capsys) -> None:
    assert render_once(vault_path, ViewConfig(subject="A"), note="B")

    assert capsys.readouterr().out.startswith("| Content | Links & Metadata | Where |\n")


def test_render_once_in_place(meeting_vault, vault_path: Path) -> None:
    assert render_once(vault_path, ViewConfig(), note="B", in_place=True)
    # Second pass finds nothing to change
    assert not render_once(vault_path, ViewConfig(), note="B", in_place=True)
    assert not render_once(vault_path, ViewConfig(), note="Missing", in_place=True)
