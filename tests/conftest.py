"""Pytest configuration and fixtures."""

import os
from pathlib import Path

import pytest

from metaview.vault.loader import Vault, load_vault


def write_note(
    vault: Path,
    rel: str,
    body: str,
    *,
    tags: list[str] | None = None,
    mtime: float | None = None,
) -> Path:
    """Write a note (with optional frontmatter tags) and pin its mtime."""
    path = vault / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    header = ["---", f"tags: [{', '.join(tags)}]", "---", ""] if tags else []
    path.write_text("\n".join(header) + body, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def vault_path(tmp_path: Path) -> Path:
    """Empty vault root (with an .obsidian folder, like a real vault)."""
    vault = tmp_path / "vault"
    (vault / ".obsidian").mkdir(parents=True)
    return vault


@pytest.fixture
def meeting_vault(vault_path: Path) -> Vault:
    """A met B: the list item lives in A and links to B."""
    write_note(vault_path, "A.md", "- Met (with:: [[B]]) today\n", mtime=2_000_000)
    write_note(vault_path, "B.md", "# B\n", tags=["person"], mtime=1_000_000)
    return load_vault(vault_path)
