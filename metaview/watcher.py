"""
File system watcher that triggers re-rendering when notes change.

This module provides:
- Watchdog-based file monitoring limited to markdown notes
- Debounced change batches (editor save cycles collapse into one)
- Content hashing so saves that change nothing trigger nothing
"""

from __future__ import annotations

import hashlib
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer


def compute_file_hash(path: Path) -> str | None:
    """SHA-256 of a file's bytes, or None if it cannot be read."""
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except OSError:
        return None


class VaultChangeHandler(FileSystemEventHandler):
    """
    Collects note changes and reports them in debounced batches.

    Key behaviors:
    - Ignores hidden paths (.obsidian, .trash) and non-markdown files
    - Waits DEBOUNCE_SECONDS after the last event for a path before reporting it
    - Drops modifications whose content hash did not change
    """

    RELEVANT_EXTENSIONS = {".md"}
    DEBOUNCE_SECONDS = 1.0

    def __init__(
        self,
        vault_path: Path,
        on_change: Callable[[list[Path]], None],
    ):
        """
        Args:
            vault_path: Path to the vault root
            on_change: Called with the changed paths of each flushed batch
        """
        super().__init__()
        self.vault_path = vault_path
        self.on_change = on_change

        # path -> time of the last event seen for it
        self.pending: dict[str, float] = {}
        # path -> hash of the content last reported
        self.file_hashes: dict[str, str] = {}

    def prime(self) -> None:
        """Record current hashes so the first save of an unchanged note is ignored."""
        for md_file in self.vault_path.rglob("*.md"):
            if self._is_relevant(str(md_file)):
                digest = compute_file_hash(md_file)
                if digest:
                    self.file_hashes[str(md_file)] = digest

    def _is_relevant(self, path: str) -> bool:
        """Check if the file is a visible markdown note inside the vault."""
        p = Path(path)
        try:
            rel = p.relative_to(self.vault_path)
        except ValueError:
            rel = p

        # Skip hidden files and directories
        if any(part.startswith(".") for part in rel.parts):
            return False

        return p.suffix.lower() in self.RELEVANT_EXTENSIONS

    def _mark(self, path: str) -> None:
        if self._is_relevant(path):
            self.pending[path] = time.time()

    def flush_pending(self, now: float | None = None) -> list[Path]:
        """Report paths whose debounce window has passed; returns them."""
        now = time.time() if now is None else now
        changed: list[Path] = []

        for path_str, stamp in list(self.pending.items()):
            if now - stamp < self.DEBOUNCE_SECONDS:
                continue
            del self.pending[path_str]

            path = Path(path_str)
            new_hash = compute_file_hash(path) if path.exists() else None
            old_hash = self.file_hashes.get(path_str)
            if new_hash == old_hash:
                continue

            if new_hash:
                self.file_hashes[path_str] = new_hash
            else:
                self.file_hashes.pop(path_str, None)

            changed.append(path)

        if changed:
            self.on_change(changed)
        return changed

    def on_created(self, event: FileCreatedEvent) -> None:
        if not event.is_directory:
            self._mark(event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:
        if not event.is_directory:
            self._mark(event.src_path)

    def on_deleted(self, event: FileDeletedEvent) -> None:
        if not event.is_directory:
            self._mark(event.src_path)

    def on_moved(self, event: FileMovedEvent) -> None:
        if not event.is_directory:
            self._mark(event.src_path)
            self._mark(event.dest_path)


def watch_vault(
    vault_path: Path,
    on_change: Callable[[list[Path]], None],
) -> tuple[Observer, VaultChangeHandler]:
    """
    Start watching a vault for note changes.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = VaultChangeHandler(vault_path=vault_path, on_change=on_change)
    handler.prime()

    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=True)
    observer.start()

    return observer, handler


def run_watch_loop(
    vault_path: Path,
    on_change: Callable[[list[Path]], None],
) -> None:
    """
    Run the watch loop until interrupted.

    This is a blocking function that watches for changes and flushes
    pending batches periodically.
    """
    observer, handler = watch_vault(vault_path, on_change)

    try:
        while True:
            time.sleep(0.5)
            handler.flush_pending()
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
