"""
Structural checks over a form design.

``check_design`` reports every way a design departs from the model's
invariants. Designs produced by the structural editor always come back
clean; stored or hand-written documents may not.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .errors import ErrorKind
from .ir import ChoiceField, FormDesign


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """One finding from ``check_design``."""

    severity: Severity
    message: str
    kind: ErrorKind | None = None
    subject: str | None = None

    def __str__(self) -> str:
        return f"{self.severity}: {self.message}"


def check_design(design: FormDesign) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []

    def error(message: str, subject: str, kind: ErrorKind | None = None) -> None:
        diagnostics.append(Diagnostic(Severity.ERROR, message, kind, subject))

    section_ids: set[str] = set()
    owner: dict[str, str] = {}
    for section in design.sections:
        if section.id in section_ids:
            error(f"duplicate section id '{section.id}'", section.id)
        section_ids.add(section.id)
        for field_id in section.field_ids:
            if field_id in owner:
                error(
                    f"field '{field_id}' listed by sections '{owner[field_id]}' and '{section.id}'",
                    field_id,
                )
                continue
            owner[field_id] = section.id
            field = design.get_field(field_id)
            if field is None:
                error(
                    f"section '{section.id}' lists unknown field '{field_id}'",
                    field_id,
                    ErrorKind.DANGLING_REFERENCE,
                )
            elif field.section_id != section.id:
                error(
                    f"field '{field_id}' claims section '{field.section_id}' "
                    f"but is listed by '{section.id}'",
                    field_id,
                )

    for field in design.fields.values():
        if field.id not in owner:
            error(f"field '{field.id}' is not listed by any section", field.id)
        if isinstance(field, ChoiceField) and not field.options:
            diagnostics.append(
                Diagnostic(
                    Severity.WARNING, f"choice field '{field.id}' has no options", None, field.id
                )
            )

    rule_ids: set[str] = set()
    for rule in design.routing:
        if rule.id in rule_ids:
            error(f"duplicate rule id '{rule.id}'", rule.id)
        rule_ids.add(rule.id)
        if not rule.conditions:
            error(f"rule '{rule.id}' has no conditions", rule.id)
        if not rule.target_field_ids:
            error(f"rule '{rule.id}' has no targets", rule.id)
        for source in rule.source_field_ids:
            if source not in design.fields:
                error(
                    f"rule '{rule.id}' tests unknown field '{source}'",
                    rule.id,
                    ErrorKind.DANGLING_REFERENCE,
                )
        for target in rule.target_field_ids:
            if target not in design.fields:
                error(
                    f"rule '{rule.id}' targets unknown field '{target}'",
                    rule.id,
                    ErrorKind.DANGLING_REFERENCE,
                )

    return diagnostics


def is_consistent(design: FormDesign) -> bool:
    """True when ``check_design`` reports no errors."""
    return not any(d.severity == Severity.ERROR for d in check_design(design))
