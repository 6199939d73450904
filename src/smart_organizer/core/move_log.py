"""Move log recording one organize run so it can be undone.

The log is plain UTF-8 text stored inside the organized directory, one record
per line::

    /data/inbox/report.pdf → /data/inbox/PDF/report.pdf

Paths are escaped before writing (backslash, newline, carriage return and the
arrow itself) so the separator can never appear inside an encoded path.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from ..exceptions import LogFormatError, NoLogError, PersistenceError

logger = logging.getLogger(__name__)

LOG_FILE_NAME = "organizer_log.txt"
SEPARATOR = " → "

_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "→": "\\u2192",
}
_UNESCAPES = {
    "\\\\": "\\",
    "\\n": "\n",
    "\\r": "\r",
    "\\u2192": "→",
}
_UNESCAPE_RE = re.compile(r"\\u2192|\\[\\nr]")


def escape_path(path: Path) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in str(path))


def unescape_path(text: str) -> Path:
    # Left to right, so an escaped backslash followed by "n" stays two characters
    result = []
    pos = 0
    while pos < len(text):
        match = _UNESCAPE_RE.match(text, pos)
        if match:
            result.append(_UNESCAPES[match.group(0)])
            pos = match.end()
        elif text[pos] == "\\":
            raise LogFormatError(f"Invalid escape sequence in log path: {text!r}")
        else:
            result.append(text[pos])
            pos += 1
    return Path("".join(result))


@dataclass(frozen=True)
class MoveRecord:
    """A single completed move."""
    source: Path
    destination: Path

    def to_line(self) -> str:
        return f"{escape_path(self.source)}{SEPARATOR}{escape_path(self.destination)}"

    @classmethod
    def from_line(cls, line: str) -> "MoveRecord":
        parts = line.split(SEPARATOR)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise LogFormatError(f"Malformed move log line: {line!r}")
        return cls(source=unescape_path(parts[0]), destination=unescape_path(parts[1]))


class MoveLog:
    """Ordered, append-only list of moves for one organize run."""

    def __init__(self, records: Optional[List[MoveRecord]] = None):
        self._records: List[MoveRecord] = list(records or [])

    @staticmethod
    def path_for(source_directory: Path) -> Path:
        """Reserved location of the log inside an organized directory."""
        return Path(source_directory) / LOG_FILE_NAME

    def append(self, source: Path, destination: Path) -> MoveRecord:
        record = MoveRecord(source=Path(source), destination=Path(destination))
        self._records.append(record)
        return record

    @property
    def records(self) -> List[MoveRecord]:
        return list(self._records)

    def reversed(self) -> Iterator[MoveRecord]:
        """Records in undo order, last move first."""
        return reversed(self._records)

    def __iter__(self) -> Iterator[MoveRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def dumps(self) -> str:
        return "".join(f"{record.to_line()}\n" for record in self._records)

    @classmethod
    def loads(cls, text: str) -> "MoveLog":
        lines = (line.rstrip("\r") for line in text.split("\n"))
        records = [MoveRecord.from_line(line) for line in lines if line.strip()]
        return cls(records)

    def save(self, log_path: Path) -> None:
        """Write the log, replacing any previous log at the same path."""
        try:
            Path(log_path).write_text(self.dumps(), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to write move log {log_path}: {e}")

        logger.info(f"Saved move log with {len(self)} records to {log_path}")

    @classmethod
    def load(cls, log_path: Path) -> "MoveLog":
        log_path = Path(log_path)
        if not log_path.is_file():
            raise NoLogError(f"No move log found at {log_path}")

        try:
            text = log_path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to read move log {log_path}: {e}")

        return cls.loads(text)

    @staticmethod
    def delete(log_path: Path) -> None:
        try:
            Path(log_path).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to delete move log {log_path}: {e}")
