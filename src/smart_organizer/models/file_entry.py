"""File entry model for files discovered during a walk."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class FileEntry:
    """A regular file found under the source directory."""
    path: Path
    name: str
    modified: float
    content_category: Optional[str] = None

    @classmethod
    def from_path(cls, path: Path, content_category: Optional[str] = None) -> "FileEntry":
        """Build an entry from the file system.

        Raises OSError when the file cannot be stat'ed (vanished, no access).
        """
        path = Path(path).absolute()
        stat = path.stat()
        return cls(
            path=path,
            name=path.name,
            modified=stat.st_mtime,
            content_category=content_category,
        )

    @property
    def extension(self) -> str:
        """Extension without the dot, case preserved; empty when there is none.

        A name whose only dot is the leading one (``.gitignore``) or whose last
        character is the dot (``archive.``) has no extension.
        """
        dot = self.name.rfind(".")
        if dot <= 0:
            return ""
        return self.name[dot + 1:]

    @property
    def modified_at(self) -> datetime:
        """Modification time in local time."""
        return datetime.fromtimestamp(self.modified)
