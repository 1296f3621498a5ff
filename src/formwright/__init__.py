"""
Formwright - dynamic form design engine for service request forms.

Sections of typed fields, conditional routing rules, and a runtime that
replays those rules to decide what an end user sees and must fill in.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import (
    ConfigError,
    DesignLoadError,
    FormwrightError,
    LegacyFormatError,
    SubmissionRejected,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "FormwrightError",
    "DesignLoadError",
    "LegacyFormatError",
    "ConfigError",
    "SubmissionRejected",
]
