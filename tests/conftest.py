"""Shared fixtures for smart organizer tests."""

from pathlib import Path
from typing import Callable, Dict

import pytest


def _snapshot(directory: Path) -> Dict[str, bytes]:
    return {
        str(path.relative_to(directory)): path.read_bytes()
        for path in directory.rglob('*')
        if path.is_file()
    }


@pytest.fixture
def tree_snapshot() -> Callable[[Path], Dict[str, bytes]]:
    """Return a helper mapping every file under a directory to its contents."""
    return _snapshot


@pytest.fixture
def source_dir(tmp_path):
    """Create a directory with a mix of files, some nested."""
    source = tmp_path / "inbox"
    source.mkdir()

    (source / "report.PDF").write_bytes(b"pdf data")
    (source / "photo.jpg").write_bytes(b"jpeg data")
    (source / "notes.txt").write_text("some notes")
    (source / "README").write_text("readme")
    (source / ".gitignore").write_text("*.pyc\n")

    nested = source / "projects" / "2023"
    nested.mkdir(parents=True)
    (nested / "data.csv").write_text("a,b\n1,2\n")
    (nested / "diagram.png").write_bytes(b"png data")

    return source
