"""Reverse the most recent organize run from its move log."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set
import logging

from ..exceptions import NoLogError
from .events import (
    EventCallback,
    FileRestored,
    NoLogFound,
    OrganizerEvent,
    RestoreFailed,
    UndoCompleted,
)
from .move_log import MoveLog

logger = logging.getLogger(__name__)


@dataclass
class UndoReport:
    """Outcome of one undo."""
    source_directory: Path
    log_found: bool = True
    restored: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    removed_folders: List[Path] = field(default_factory=list)


class UndoEngine:
    """Replay a move log backwards, then delete it.

    Undo is best effort: records whose moved file is gone are skipped, a
    record that fails to restore is reported and the replay goes on. A file
    now sitting at a record's original path is overwritten.

    Empty-folder cleanup removes every destination folder left empty,
    including one that already existed, empty, before the organize run.
    """

    def __init__(self, source_directory: Path):
        self.source_directory = Path(source_directory).absolute()
        self.log_path = MoveLog.path_for(self.source_directory)

    def has_log(self) -> bool:
        return self.log_path.is_file()

    def undo_last(self, on_event: Optional[EventCallback] = None,
                  remove_empty_folders: bool = False) -> UndoReport:
        """Undo the last organize run.

        Raises PersistenceError if the log exists but cannot be read or parsed.
        """
        emit = on_event or _ignore_event
        report = UndoReport(source_directory=self.source_directory)

        try:
            move_log = MoveLog.load(self.log_path)
        except NoLogError as e:
            logger.info(f"Nothing to undo: {e}")
            report.log_found = False
            emit(NoLogFound(log_path=str(self.log_path)))
            return report

        logger.info(f"Undoing {len(move_log)} moves recorded in {self.log_path}")
        touched_folders: Set[Path] = set()

        for record in move_log.reversed():
            if not record.destination.exists():
                report.skipped += 1
                logger.debug(f"Skipping {record.destination}: no longer exists")
                continue

            try:
                record.source.parent.mkdir(parents=True, exist_ok=True)
                record.destination.replace(record.source)
            except OSError as e:
                error_msg = f"Failed to restore {record.destination} to {record.source}: {e}"
                report.failed += 1
                report.errors.append(error_msg)
                logger.error(error_msg)
                emit(RestoreFailed(file_name=record.destination.name, reason=str(e)))
                continue

            report.restored += 1
            touched_folders.add(record.destination.parent)
            logger.debug(f"Restored: {record.destination} -> {record.source}")
            emit(FileRestored(file_name=record.destination.name))

        MoveLog.delete(self.log_path)

        if remove_empty_folders:
            report.removed_folders = self._remove_empty_folders(touched_folders)

        logger.info(
            f"Undo complete: {report.restored} restored, {report.skipped} skipped, "
            f"{report.failed} failed"
        )
        emit(UndoCompleted(restored=report.restored, skipped=report.skipped, failed=report.failed))
        return report

    def _remove_empty_folders(self, folders: Set[Path]) -> List[Path]:
        removed = []
        for folder in sorted(folders, reverse=True):
            if folder == self.source_directory or not folder.is_dir():
                continue
            if any(folder.iterdir()):
                continue
            try:
                folder.rmdir()
            except OSError as e:
                logger.warning(f"Could not remove empty folder {folder}: {e}")
                continue
            removed.append(folder)
        return removed


def undo_last(source_directory: Path, on_event: Optional[EventCallback] = None,
              remove_empty_folders: bool = False) -> UndoReport:
    """Undo the last organize run in ``source_directory``; see :class:`UndoEngine`."""
    return UndoEngine(source_directory).undo_last(on_event, remove_empty_folders)


def _ignore_event(event: OrganizerEvent) -> None:
    pass
