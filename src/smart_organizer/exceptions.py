"""Custom exceptions for the smart organizer."""

from typing import Any, Optional


class OrganizerError(Exception):
    """Base exception for smart organizer errors."""
    pass


class ConfigurationError(OrganizerError):
    """Raised when there's an error in configuration."""
    pass


class DirectoryError(ConfigurationError):
    """Raised when the source path is missing or not a directory."""
    pass


class ClassificationError(OrganizerError):
    """Raised when a file cannot be mapped to a usable folder name."""
    pass


class FileOperationError(OrganizerError):
    """Raised when a single file operation fails."""
    pass


class NoLogError(OrganizerError):
    """Raised when there is no move log to undo."""
    pass


class PersistenceError(OrganizerError):
    """Raised when the move log cannot be written or read.

    When raised at the end of an organize run, ``report`` holds the partial
    report of the moves that already happened.
    """

    def __init__(self, message: str, report: Optional[Any] = None):
        super().__init__(message)
        self.report = report


class LogFormatError(PersistenceError):
    """Raised when a move log line cannot be parsed."""
    pass
