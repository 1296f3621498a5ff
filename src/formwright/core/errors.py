"""
Error types for Formwright design loading, conversion and submission.

Structural editing and rule evaluation never raise: they degrade to a no-op
or a ``False`` result and report through logging. The exceptions here are
for the boundaries (reading documents, legacy records, configuration) and
for callers that want a submission failure as an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class ErrorKind(StrEnum):
    """Non-fatal error categories reported by the engine."""

    INVALID_TARGET = "invalid_target"
    DANGLING_REFERENCE = "dangling_reference"
    COERCION_FAILURE = "coercion_failure"
    VALIDATION_FAILURE = "validation_failure"


class FormwrightError(Exception):
    """Base exception for all Formwright errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class DesignLoadError(FormwrightError):
    """
    Raised when a persisted form design cannot be read.

    Examples:
    - File is not valid JSON
    - Document does not match the FormDesign shape
    - Unknown field kind
    """


class LegacyFormatError(FormwrightError):
    """
    Raised when a legacy flattened record cannot be converted.

    Examples:
    - Field whose sectionId names no section
    - Field listed in a section it does not claim
    - Field id listed by two sections
    """


class ConfigError(FormwrightError):
    """Raised when formwright.toml is malformed."""


class SubmissionRejected(FormwrightError):
    """Raised by ``SubmissionResult.raise_for_errors`` when validation failed."""

    def __init__(self, failures: list[ValidationFailure]):
        self.failures = failures
        fields = ", ".join(f.field_id for f in failures)
        super().__init__(f"Submission blocked by {len(failures)} field(s): {fields}")


@dataclass(frozen=True)
class ValidationFailure:
    """A single per-field submission violation."""

    field_id: str
    label: str
    message: str
    kind: ErrorKind = ErrorKind.VALIDATION_FAILURE


@dataclass
class ErrorContext:
    """
    Where an error was found.

    Attributes:
        source: File the document was read from, if any
        location: Dotted path inside the document (e.g. ``fields.f1.kind``)
    """

    source: Path | None = None
    location: str | None = None

    def format(self) -> str:
        parts = [str(p) for p in (self.source, self.location) if p]
        return " at ".join(parts) if parts else "<design>"


def make_load_error(
    message: str,
    source: Path | None = None,
    location: str | None = None,
) -> DesignLoadError:
    """Helper to create a DesignLoadError with optional context."""
    if source or location:
        return DesignLoadError(message, ErrorContext(source=source, location=location))
    return DesignLoadError(message)
