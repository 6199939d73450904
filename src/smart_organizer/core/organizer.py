"""Main orchestration logic for organizing a directory."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import logging

from ..exceptions import ClassificationError, DirectoryError, FileOperationError, PersistenceError
from ..models.config import CustomRuleSet, OrganizerConfig, SortMode
from ..models.file_entry import FileEntry
from .classifier import FileClassifier, UNCATEGORIZED_FOLDER
from .events import (
    EventCallback,
    FileFailed,
    FileMoved,
    FilePreviewed,
    OrganizationSummary,
    OrganizerEvent,
)
from .move_log import MoveLog

logger = logging.getLogger(__name__)


@dataclass
class OrganizationReport:
    """Outcome of one organize run."""
    source_directory: Path
    sort_mode: SortMode
    preview: bool
    previewed: int = 0
    moved: int = 0
    failed: int = 0
    overwritten: int = 0
    by_folder: Dict[str, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    move_log: MoveLog = field(default_factory=MoveLog)
    log_path: Optional[Path] = None
    complete: bool = False

    @property
    def processed(self) -> int:
        return self.previewed + self.moved + self.failed


class FileOrganizer:
    """Sort every file under a directory into per-category folders.

    In a real run each file is moved to ``source_directory/<folder>/<name>``.
    A file already at that destination is overwritten (last writer wins); the
    replaced file is lost and cannot be brought back by undo. The move log is
    saved to ``source_directory/organizer_log.txt`` at the end of the run,
    replacing the log of any earlier run.
    """

    def __init__(self, source_directory: Path, sort_mode: SortMode,
                 custom_rules: Optional[CustomRuleSet] = None,
                 classifier: Optional[FileClassifier] = None):
        self.source_directory = Path(source_directory).absolute()
        self.sort_mode = SortMode.parse(sort_mode)
        if not isinstance(custom_rules, CustomRuleSet):
            custom_rules = CustomRuleSet(custom_rules or {})
        self.custom_rules = custom_rules
        self.classifier = classifier or FileClassifier()
        self.log_path = MoveLog.path_for(self.source_directory)

    @classmethod
    def from_config(cls, config: OrganizerConfig,
                    classifier: Optional[FileClassifier] = None) -> "FileOrganizer":
        return cls(config.source_directory, config.sort_mode, config.custom_rules, classifier)

    def organize(self, preview_only: bool = False,
                 on_event: Optional[EventCallback] = None) -> OrganizationReport:
        """
        Organize the source directory.

        Raises:
            DirectoryError: the source is missing or not a directory.
            PersistenceError: files were moved but the move log could not be
                saved. ``error.report`` holds the partial report.
        """
        if not self.source_directory.is_dir():
            raise DirectoryError(f"Invalid directory: {self.source_directory}")

        emit = on_event or _ignore_event
        report = OrganizationReport(
            source_directory=self.source_directory,
            sort_mode=self.sort_mode,
            preview=preview_only,
        )

        files = self.scan_directory()
        logger.info(
            f"{'Previewing' if preview_only else 'Organizing'} {len(files)} files "
            f"in {self.source_directory} by {self.sort_mode.value}"
        )

        for file_path in files:
            try:
                event = self._process_file(file_path, preview_only, report)
            except (OSError, FileOperationError) as e:
                error_msg = f"{file_path.name}: {e}"
                report.failed += 1
                report.errors.append(error_msg)
                logger.error(error_msg)
                event = FileFailed(file_name=file_path.name, reason=str(e))
            emit(event)

        if not preview_only:
            try:
                report.move_log.save(self.log_path)
            except PersistenceError as e:
                logger.error(
                    f"{report.moved} files were moved but the move log could not be saved; "
                    f"this run cannot be undone: {e}"
                )
                raise PersistenceError(str(e), report=report) from e
            report.log_path = self.log_path

        report.complete = True
        emit(OrganizationSummary(
            preview=preview_only,
            previewed=report.previewed,
            moved=report.moved,
            failed=report.failed,
            log_path=str(report.log_path) if report.log_path else None,
        ))
        logger.info(
            f"Finished: {report.moved} moved, {report.previewed} previewed, {report.failed} failed"
        )
        return report

    def scan_directory(self) -> List[Path]:
        """Every regular file under the source, minus the move log, in a stable order."""
        return sorted(
            path for path in self.source_directory.rglob('*')
            if path.is_file() and path != self.log_path
        )

    def folder_for(self, entry: FileEntry) -> str:
        """Classify a file, falling back to UNCATEGORIZED on a bad result."""
        try:
            return self.classifier.classify(entry, self.sort_mode, self.custom_rules)
        except ClassificationError as e:
            logger.warning(f"{e}; using {UNCATEGORIZED_FOLDER} for {entry.name}")
            return UNCATEGORIZED_FOLDER

    def _process_file(self, file_path: Path, preview_only: bool,
                      report: OrganizationReport) -> OrganizerEvent:
        entry = FileEntry.from_path(file_path)
        folder = self.folder_for(entry)
        target_dir = self.source_directory / folder
        target_path = target_dir / entry.name

        if preview_only:
            report.previewed += 1
            report.by_folder[folder] = report.by_folder.get(folder, 0) + 1
            logger.debug(f"Would move: {entry.name} -> {folder}")
            return FilePreviewed(file_name=entry.name, folder=folder)

        overwrote = target_path.exists() and target_path != entry.path
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            entry.path.replace(target_path)
        except OSError as e:
            raise FileOperationError(f"Failed to move {entry.path} to {target_dir}: {e}") from e

        if overwrote:
            report.overwritten += 1
            logger.warning(f"Overwrote existing file {target_path} with {entry.path}")

        report.move_log.append(entry.path, target_path)
        report.moved += 1
        report.by_folder[folder] = report.by_folder.get(folder, 0) + 1

        logger.debug(f"Moved: {entry.path} -> {target_path}")
        return FileMoved(file_name=entry.name, folder=folder, overwrote=overwrote)


def organize(source_directory: Path, sort_mode: SortMode,
             custom_rules: Optional[CustomRuleSet] = None,
             preview_only: bool = False,
             on_event: Optional[EventCallback] = None) -> OrganizationReport:
    """Organize ``source_directory`` once; see :class:`FileOrganizer`."""
    organizer = FileOrganizer(source_directory, sort_mode, custom_rules)
    return organizer.organize(preview_only=preview_only, on_event=on_event)


def _ignore_event(event: OrganizerEvent) -> None:
    pass
