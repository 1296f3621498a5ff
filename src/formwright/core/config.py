"""
Settings loaded from ``formwright.toml``.

Example:

    [editor]
    default_section_title = "New Section"
    choice_options = ["Option 1", "Option 2"]
    copy_suffix = " (Copy)"

    [runtime]
    required_message = "This field is required"

    [logging]
    level = "WARNING"

Every key is optional; a missing file yields the defaults.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError, ErrorContext

CONFIG_FILENAME = "formwright.toml"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditorSettings:
    """Defaults used by structural editing operations."""

    default_section_title: str = "New Section"
    choice_options: tuple[str, ...] = ("Option 1", "Option 2")
    copy_suffix: str = " (Copy)"


@dataclass(frozen=True)
class RuntimeSettings:
    """Defaults used when rendering and validating submissions."""

    required_message: str = "This field is required"


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "WARNING"


@dataclass(frozen=True)
class Settings:
    """All Formwright settings."""

    editor: EditorSettings = field(default_factory=EditorSettings)
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


def _str(table: dict, key: str, default: str, path: Path) -> str:
    value = table.get(key, default)
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string", ErrorContext(source=path, location=key))
    return value


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from ``path`` (default: ./formwright.toml).

    Raises:
        ConfigError: If the file exists but is not valid TOML or has wrongly
            typed values.
    """
    path = path or Path.cwd() / CONFIG_FILENAME
    if not path.is_file():
        logger.debug("No %s found at %s, using defaults", CONFIG_FILENAME, path)
        return Settings()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(str(e), ErrorContext(source=path)) from e

    editor_data = data.get("editor", {})
    runtime_data = data.get("runtime", {})
    logging_data = data.get("logging", {})

    options = editor_data.get("choice_options", list(EditorSettings.choice_options))
    if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
        raise ConfigError(
            "'choice_options' must be a list of strings",
            ErrorContext(source=path, location="editor.choice_options"),
        )

    level = _str(logging_data, "level", LoggingSettings.level, path).upper()
    if level not in logging.getLevelNamesMapping():
        raise ConfigError(
            f"unknown log level '{level}'", ErrorContext(source=path, location="logging.level")
        )

    return Settings(
        editor=EditorSettings(
            default_section_title=_str(
                editor_data, "default_section_title", EditorSettings.default_section_title, path
            ),
            choice_options=tuple(options),
            copy_suffix=_str(editor_data, "copy_suffix", EditorSettings.copy_suffix, path),
        ),
        runtime=RuntimeSettings(
            required_message=_str(
                runtime_data, "required_message", RuntimeSettings.required_message, path
            ),
        ),
        logging=LoggingSettings(level=level),
    )
