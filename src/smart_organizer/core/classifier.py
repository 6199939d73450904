"""Folder classification for discovered files."""

import logging
import mimetypes
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from ..exceptions import ClassificationError
from ..models.config import CustomRuleSet, SortMode
from ..models.file_entry import FileEntry

logger = logging.getLogger(__name__)

UNKNOWN_FOLDER = "UNKNOWN"
NO_EXTENSION_FOLDER = "NO_EXTENSION"
UNCATEGORIZED_FOLDER = "UNCATEGORIZED"

DATE_FORMAT = "%Y-%m-%d"

# Probes return the primary content category ("image", "text", ...) or None.
ContentProbe = Callable[[Path], Optional[str]]


class MimeTypeProbe:
    """Guess the content category of a file from the mimetypes registry."""

    def __init__(self, strict: bool = False):
        self.strict = strict

    def __call__(self, path: Path) -> Optional[str]:
        mime, _ = mimetypes.guess_type(path.name, strict=self.strict)
        if not mime:
            return None
        return mime.split("/", 1)[0]


class FileClassifier:
    """Map a file entry and a sort mode to a destination folder name."""

    def __init__(self, probe: Optional[ContentProbe] = None):
        self.probe = probe or MimeTypeProbe()
        self._handlers: Dict[SortMode, Callable[[FileEntry, CustomRuleSet], str]] = {
            SortMode.TYPE: self._by_content_type,
            SortMode.EXTENSION: self._by_extension,
            SortMode.DATE: self._by_date,
            SortMode.CUSTOM: self._by_custom_rule,
        }

    def classify(self, entry: FileEntry, sort_mode: SortMode,
                 custom_rules: Optional[Mapping[str, str]] = None) -> str:
        """
        Return the folder name for a file.

        The result never contains a path separator. Raises ClassificationError
        when no usable folder name can be derived.
        """
        handler = self._handlers.get(sort_mode)
        if handler is None:
            return UNCATEGORIZED_FOLDER

        if not isinstance(custom_rules, CustomRuleSet):
            custom_rules = CustomRuleSet(custom_rules or {})

        folder = handler(entry, custom_rules)
        return sanitize_folder_name(folder)

    def content_category(self, entry: FileEntry) -> Optional[str]:
        """Best-effort content category; None when the probe cannot tell."""
        if entry.content_category:
            return entry.content_category

        try:
            return self.probe(entry.path)
        except (OSError, ValueError) as e:
            logger.debug(f"Content probe failed for {entry.path}: {e}")
            return None

    def _by_content_type(self, entry: FileEntry, custom_rules: CustomRuleSet) -> str:
        category = self.content_category(entry)
        return category.upper() if category else UNKNOWN_FOLDER

    def _by_extension(self, entry: FileEntry, custom_rules: CustomRuleSet) -> str:
        extension = entry.extension
        return extension.upper() if extension else NO_EXTENSION_FOLDER

    def _by_date(self, entry: FileEntry, custom_rules: CustomRuleSet) -> str:
        return entry.modified_at.strftime(DATE_FORMAT)

    def _by_custom_rule(self, entry: FileEntry, custom_rules: CustomRuleSet) -> str:
        return custom_rules.folder_for(entry.extension)


def sanitize_folder_name(folder: str) -> str:
    """Replace path separators so a folder name stays a single component."""
    cleaned = folder.replace("/", "_").replace("\\", "_").strip()
    if not cleaned or cleaned in (".", ".."):
        raise ClassificationError(f"Unusable folder name: '{folder}'")
    return cleaned
