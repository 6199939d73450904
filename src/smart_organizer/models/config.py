"""Configuration model for the smart organizer."""

from pathlib import Path
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, Optional
from dataclasses import dataclass, field
from enum import Enum
import json

from ..exceptions import ConfigurationError


OTHER_FOLDER = "OTHER"


class SortMode(Enum):
    """Classification strategy for a run."""
    TYPE = "type"
    EXTENSION = "extension"
    DATE = "date"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value) -> "SortMode":
        """Parse a mode from its name, its value or its menu number (1-4)."""
        if isinstance(value, cls):
            return value

        text = str(value).strip().lower()
        menu = {str(i): mode for i, mode in enumerate(cls, start=1)}
        if text in menu:
            return menu[text]

        for mode in cls:
            if text in (mode.value, mode.name.lower()):
                return mode

        choices = ", ".join(mode.value for mode in cls)
        raise ConfigurationError(f"Unknown sort mode '{value}' (expected one of: {choices})")


def _normalize_extension(extension: str) -> str:
    return extension.strip().lstrip(".").lower()


def _validate_folder_name(folder: str) -> str:
    folder = folder.strip()
    if not folder or folder in (".", ".."):
        raise ConfigurationError(f"Invalid folder name: '{folder}'")
    if "/" in folder or "\\" in folder:
        raise ConfigurationError(f"Folder name must not contain a path separator: '{folder}'")
    return folder


class CustomRuleSet(Mapping):
    """Mapping from lowercase extension (no dot) to destination folder name."""

    def __init__(self, rules: Optional[Mapping[str, str]] = None):
        self._rules: Dict[str, str] = {}
        for extension, folder in (rules or {}).items():
            self.add(extension, folder)

    def add(self, extension: str, folder: str) -> None:
        """Add or replace the rule for an extension."""
        key = _normalize_extension(extension)
        if not key:
            raise ConfigurationError(f"Invalid extension in rule: '{extension}'")
        self._rules[key] = _validate_folder_name(folder)

    def update_from(self, other: Mapping[str, str]) -> None:
        """Add every rule of another mapping, replacing existing extensions."""
        for extension, folder in other.items():
            self.add(extension, folder)

    def folder_for(self, extension: str) -> str:
        """Return the folder for an extension, or OTHER when no rule matches."""
        return self._rules.get(_normalize_extension(extension), OTHER_FOLDER)

    @classmethod
    def from_strings(cls, lines: Iterable[str]) -> "CustomRuleSet":
        """Build a rule set from ``ext=Folder`` strings.

        Comma separated entries on one line are accepted too, so
        ``"pdf=Documents, jpg=Images"`` yields two rules.
        """
        rules = cls()
        for line in lines:
            for entry in line.split(","):
                entry = entry.strip()
                if not entry:
                    continue
                parts = entry.split("=")
                if len(parts) != 2:
                    raise ConfigurationError(f"Rule must look like 'ext=Folder': '{entry}'")
                rules.add(parts[0], parts[1])
        return rules

    def to_dict(self) -> Dict[str, str]:
        return dict(self._rules)

    def __getitem__(self, extension: str) -> str:
        return self._rules[_normalize_extension(extension)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"CustomRuleSet({self._rules!r})"


@dataclass
class OrganizerConfig:
    """Run configuration handed to the organizer engine."""
    source_directory: Path
    sort_mode: SortMode = SortMode.EXTENSION
    custom_rules: CustomRuleSet = field(default_factory=CustomRuleSet)
    preview_only: bool = False

    def __post_init__(self):
        self.source_directory = Path(self.source_directory)
        self.sort_mode = SortMode.parse(self.sort_mode)
        if not isinstance(self.custom_rules, CustomRuleSet):
            self.custom_rules = CustomRuleSet(self.custom_rules or {})

    def to_dict(self) -> Dict:
        return {
            "source_directory": str(self.source_directory),
            "sort_mode": self.sort_mode.value,
            "custom_rules": self.custom_rules.to_dict(),
            "preview_only": self.preview_only,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "OrganizerConfig":
        if "source_directory" not in data:
            raise ConfigurationError("Configuration is missing 'source_directory'")

        rules = data.get("custom_rules") or {}
        if not isinstance(rules, dict):
            raise ConfigurationError("'custom_rules' must be an object of extension: folder")

        return cls(
            source_directory=Path(data["source_directory"]),
            sort_mode=SortMode.parse(data.get("sort_mode", SortMode.EXTENSION.value)),
            custom_rules=CustomRuleSet(rules),
            preview_only=bool(data.get("preview_only", False)),
        )


def load_config(config_path: Path) -> OrganizerConfig:
    """Load configuration from JSON file."""
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read configuration {config_path}: {e}")

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration {config_path} must be a JSON object")

    return OrganizerConfig.from_dict(config_data)


def save_config(config: OrganizerConfig, config_path: Path) -> None:
    """Save configuration to JSON file."""
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=2)


def create_default_config(config_path: Path, source_directory: Path) -> OrganizerConfig:
    """Create a default configuration file with a few example rules."""
    default_config = OrganizerConfig(
        source_directory=source_directory,
        sort_mode=SortMode.CUSTOM,
        custom_rules=CustomRuleSet({
            "pdf": "Documents",
            "docx": "Documents",
            "jpg": "Images",
            "png": "Images",
            "mp3": "Music",
        }),
    )
    save_config(default_config, config_path)
    return default_config
