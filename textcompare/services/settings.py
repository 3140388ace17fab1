"""
Application settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from textcompare.core.diff.aligner import DiffAlgorithm
from textcompare.core.diff.text_diff import TextCompareOptions


logger = logging.getLogger(__name__)


class OutputFormat(Enum):
    """Command line output format."""
    SIDE_BY_SIDE = "side-by-side"
    INLINE = "inline"
    JSON = "json"
    STATS = "stats"

    @classmethod
    def from_string(cls, value: str) -> 'OutputFormat':
        """Create from string value or name."""
        for output_format in cls:
            if output_format.value == value.lower():
                return output_format
        try:
            return cls[value.upper().replace('-', '_')]
        except (KeyError, AttributeError):
            return cls.SIDE_BY_SIDE


@dataclass
class ComparisonSettings:
    """Settings for text comparison."""
    algorithm: DiffAlgorithm = DiffAlgorithm.LCS
    compute_intraline: bool = True
    table_cell_limit: int = 4_000_000
    debounce_ms: int = 300
    strip_trailing_whitespace: bool = False


@dataclass
class OutputSettings:
    """Settings for plain-text output."""
    format: OutputFormat = OutputFormat.SIDE_BY_SIDE
    width: int = 160
    tab_size: int = 4
    color: bool = True


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    comparison: ComparisonSettings = field(default_factory=ComparisonSettings)
    output: OutputSettings = field(default_factory=OutputSettings)

    def to_compare_options(self) -> TextCompareOptions:
        """Build engine options from the comparison settings."""
        return TextCompareOptions(
            algorithm=self.comparison.algorithm,
            compute_intraline=self.comparison.compute_intraline,
            table_cell_limit=self.comparison.table_cell_limit,
        )


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None
        self._observers: list[Callable[[ApplicationSettings], None]] = []

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'TextCompare' / 'settings.json'
        config_home = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(config_home) / 'textcompare' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk, falling back to defaults."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return self._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Could not load settings from %s: %s", self.settings_path, e)
            return ApplicationSettings()

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._to_dict(settings), f, indent=2)
        except OSError as e:
            logger.error("Could not save settings to %s: %s", self.settings_path, e)
            return False

        self._settings = settings
        self._notify_observers()
        return True

    def reset(self) -> ApplicationSettings:
        """Reset to default settings."""
        self._settings = ApplicationSettings()
        self.save()
        return self._settings

    def add_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        """Add a callback to be notified of settings changes."""
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        """Remove a settings change observer."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        for callback in self._observers:
            try:
                callback(self._settings)
            except Exception:
                logger.exception("Settings observer %r failed", callback)

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        def convert(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.name
            elif hasattr(obj, '__dataclass_fields__'):
                return {k: convert(getattr(obj, k)) for k in asdict(obj)}
            elif isinstance(obj, list):
                return [convert(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            return obj

        return convert(settings)

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        def get_section(name: str) -> dict:
            section = data.get(name, {})
            if not isinstance(section, dict):
                logger.warning("Ignoring settings section %r: expected an object", name)
                return {}
            return section

        def get_value(section: dict, key: str, default: Any) -> Any:
            if key not in section:
                return default
            value = section[key]
            if isinstance(default, Enum):
                if isinstance(value, str) and value in type(default).__members__:
                    return type(default)[value]
            elif type(value) is type(default) and not (isinstance(value, int) and value < 0):
                return value
            logger.warning("Ignoring invalid setting %s=%r, using %r", key, value, default)
            return default

        def load(cls: type, section: dict) -> Any:
            defaults = cls()
            return cls(**{
                name: get_value(section, name, getattr(defaults, name))
                for name in defaults.__dataclass_fields__
            })

        return ApplicationSettings(
            comparison=load(ComparisonSettings, get_section('comparison')),
            output=load(OutputSettings, get_section('output')),
        )
