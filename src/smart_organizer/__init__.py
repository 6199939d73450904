"""Smart File Organizer

Sort the files of a directory into folders by content type, extension,
modification date or custom rules, and undo the most recent run.
"""

__version__ = "0.1.0"

from .core.classifier import FileClassifier, MimeTypeProbe
from .core.events import (
    OrganizerEvent,
    FilePreviewed,
    FileMoved,
    FileFailed,
    OrganizationSummary,
    FileRestored,
    RestoreFailed,
    UndoCompleted,
    NoLogFound,
)
from .core.move_log import MoveLog, MoveRecord, LOG_FILE_NAME
from .core.organizer import FileOrganizer, OrganizationReport, organize
from .core.undo import UndoEngine, UndoReport, undo_last
from .models.config import SortMode, CustomRuleSet, OrganizerConfig, load_config, save_config
from .models.file_entry import FileEntry

__all__ = [
    # Engines
    "FileOrganizer",
    "UndoEngine",
    "FileClassifier",
    "MimeTypeProbe",
    "organize",
    "undo_last",

    # Data model
    "SortMode",
    "CustomRuleSet",
    "OrganizerConfig",
    "FileEntry",
    "MoveLog",
    "MoveRecord",
    "OrganizationReport",
    "UndoReport",
    "LOG_FILE_NAME",

    # Events
    "OrganizerEvent",
    "FilePreviewed",
    "FileMoved",
    "FileFailed",
    "OrganizationSummary",
    "FileRestored",
    "RestoreFailed",
    "UndoCompleted",
    "NoLogFound",

    # Configuration helpers
    "load_config",
    "save_config",
]
