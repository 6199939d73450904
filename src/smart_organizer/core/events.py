"""
Outcome events emitted by the organizer and undo engines.

Engines accept an optional ``on_event`` callback and call it once per
discovered file or log record, then once more with a terminal event.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional


@dataclass
class OrganizerEvent:
    """Base class for all organizer events."""
    timestamp: datetime = field(default_factory=datetime.now, kw_only=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_type": self.__class__.__name__,
            "timestamp": self.timestamp.isoformat(),
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        return {}


EventCallback = Callable[[OrganizerEvent], None]


@dataclass
class FilePreviewed(OrganizerEvent):
    """A file would be moved into ``folder`` (preview mode)."""
    file_name: str
    folder: str

    def _get_event_data(self) -> Dict[str, Any]:
        return {"previewed": self.file_name, "folder": self.folder}


@dataclass
class FileMoved(OrganizerEvent):
    """A file was moved into ``folder``.

    ``overwrote`` is True when a file already sitting at the destination was
    replaced.
    """
    file_name: str
    folder: str
    overwrote: bool = False

    def _get_event_data(self) -> Dict[str, Any]:
        return {"moved": self.file_name, "folder": self.folder, "overwrote": self.overwrote}


@dataclass
class FileFailed(OrganizerEvent):
    """A file could not be classified or moved; the run went on."""
    file_name: str
    reason: str

    def _get_event_data(self) -> Dict[str, Any]:
        return {"failed": self.file_name, "reason": self.reason}


@dataclass
class OrganizationSummary(OrganizerEvent):
    """Terminal event of an organize run."""
    preview: bool
    previewed: int
    moved: int
    failed: int
    log_path: Optional[str] = None

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "preview": self.preview,
            "previewed": self.previewed,
            "moved": self.moved,
            "failed": self.failed,
            "log_path": self.log_path,
        }


@dataclass
class FileRestored(OrganizerEvent):
    """A logged move was reversed."""
    file_name: str

    def _get_event_data(self) -> Dict[str, Any]:
        return {"restored": self.file_name}


@dataclass
class RestoreFailed(OrganizerEvent):
    """A logged move could not be reversed; the undo went on."""
    file_name: str
    reason: str

    def _get_event_data(self) -> Dict[str, Any]:
        return {"failed": self.file_name, "reason": self.reason}


@dataclass
class UndoCompleted(OrganizerEvent):
    """Terminal event of an undo that found a log."""
    restored: int
    skipped: int
    failed: int

    def _get_event_data(self) -> Dict[str, Any]:
        return {"undoComplete": True, "restored": self.restored,
                "skipped": self.skipped, "failed": self.failed}


@dataclass
class NoLogFound(OrganizerEvent):
    """Terminal event of an undo with nothing to undo."""
    log_path: str

    def _get_event_data(self) -> Dict[str, Any]:
        return {"noLogFound": True, "log_path": self.log_path}
