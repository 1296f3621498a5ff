"""
Form runtime: rendering and submission validation.

Projects a design plus evaluator output into the concrete list of controls
an end user sees, and validates a submission against the derived
required-ness. The authoring preview and the live submission flow both go
through ``FormSession``, so the preview predicts runtime behaviour exactly.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .config import RuntimeSettings
from .errors import SubmissionRejected, ValidationFailure
from .evaluator import DerivedState, current_value, evaluate
from .ir import FieldKind, FieldWidth, FormDesign, FormField, field_options

logger = logging.getLogger(__name__)


class ControlType(StrEnum):
    """Widget used to present a field."""

    INPUT = "input"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    FILE = "file"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    DIVIDER = "divider"


# kind -> (control, HTML input type)
CONTROLS: dict[FieldKind, tuple[ControlType, str | None]] = {
    FieldKind.TEXT: (ControlType.INPUT, "text"),
    FieldKind.MULTILINE_TEXT: (ControlType.TEXTAREA, None),
    FieldKind.NUMBER: (ControlType.INPUT, "number"),
    FieldKind.EMAIL: (ControlType.INPUT, "email"),
    FieldKind.PHONE: (ControlType.INPUT, "tel"),
    FieldKind.DATE: (ControlType.INPUT, "date"),
    FieldKind.FILE: (ControlType.FILE, "file"),
    FieldKind.SINGLE_SELECT: (ControlType.SELECT, None),
    FieldKind.CHECKBOX: (ControlType.CHECKBOX, "checkbox"),
    FieldKind.RADIO_GROUP: (ControlType.RADIO, "radio"),
    FieldKind.HEADING: (ControlType.HEADING, None),
    FieldKind.PARAGRAPH: (ControlType.PARAGRAPH, None),
    FieldKind.SECTION_DIVIDER: (ControlType.DIVIDER, None),
}

_TRUTHY_TEXT = frozenset({"true", "on", "yes", "1"})


class RenderedField(BaseModel):
    """A visible field, ready to be drawn."""

    field_id: str
    kind: FieldKind
    control: ControlType
    input_type: str | None = None
    label: str
    placeholder: str | None = None
    help_text: str | None = None
    required: bool = False
    value: Any = None
    options: list[str] = Field(default_factory=list)
    width: FieldWidth = FieldWidth.FULL

    model_config = ConfigDict(frozen=True)


class RenderedSection(BaseModel):
    id: str
    title: str
    description: str | None = None
    collapsed: bool = False
    fields: list[RenderedField] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class RenderedForm(BaseModel):
    """Sections in order, each holding only its visible fields."""

    sections: list[RenderedSection] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def field_ids(self) -> list[str]:
        return [f.field_id for s in self.sections for f in s.fields]

    def get(self, field_id: str) -> RenderedField | None:
        for section in self.sections:
            for rendered in section.fields:
                if rendered.field_id == field_id:
                    return rendered
        return None


@dataclass
class SubmissionResult:
    """
    Outcome of validating a submission.

    Attributes:
        payload: Field id -> value, restricted to visible value-capturing fields
        failures: One entry per visible required field left empty
    """

    payload: dict[str, Any] = field(default_factory=dict)
    failures: list[ValidationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def errors(self) -> dict[str, str]:
        return {f.field_id: f.message for f in self.failures}

    def raise_for_errors(self) -> None:
        if self.failures:
            raise SubmissionRejected(self.failures)


def initial_value(field: FormField) -> Any:
    """Starting value of an untouched control."""
    return False if field.field_kind == FieldKind.CHECKBOX else ""


def initial_values(design: FormDesign) -> dict[str, Any]:
    return {f.id: initial_value(f) for f in design.ordered_fields() if f.captures_value}


def is_checked(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_TEXT
    return bool(value)


def is_empty(field: FormField, value: Any) -> bool:
    """Whether ``value`` fails to satisfy a required ``field``."""
    if field.field_kind == FieldKind.CHECKBOX:
        return not is_checked(value)
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list | tuple | set | frozenset | dict):
        return len(value) == 0
    return False


def render(
    design: FormDesign,
    values: Mapping[str, Any] | None = None,
    state: DerivedState | None = None,
) -> RenderedForm:
    """Project the design into visible controls, in section and field order."""
    values = values or {}
    state = state or evaluate(design, values)
    sections = []
    for section in design.sections:
        rendered = []
        for field_id in section.field_ids:
            form_field = design.get_field(field_id)
            if form_field is None or not state.is_visible(field_id):
                continue
            control, input_type = CONTROLS[form_field.field_kind]
            rendered.append(
                RenderedField(
                    field_id=field_id,
                    kind=form_field.field_kind,
                    control=control,
                    input_type=input_type,
                    label=form_field.label,
                    placeholder=getattr(form_field, "placeholder", None),
                    help_text=form_field.help_text,
                    required=form_field.captures_value and state.is_required(field_id),
                    value=(
                        current_value(design, field_id, values)
                        if form_field.captures_value
                        else None
                    ),
                    options=field_options(form_field),
                    width=form_field.width,
                )
            )
        sections.append(
            RenderedSection(
                id=section.id,
                title=section.title,
                description=section.description,
                collapsed=section.collapsed,
                fields=rendered,
            )
        )
    return RenderedForm(sections=sections)


def validate_submission(
    design: FormDesign,
    values: Mapping[str, Any],
    *,
    state: DerivedState | None = None,
    settings: RuntimeSettings | None = None,
) -> SubmissionResult:
    """Check required fields and build the payload.

    Hidden fields are neither validated nor submitted; display-only fields
    never carry a value.
    """
    settings = settings or RuntimeSettings()
    state = state or evaluate(design, values)
    result = SubmissionResult()

    for form_field in design.ordered_fields():
        if not form_field.captures_value or not state.is_visible(form_field.id):
            continue
        value = values.get(form_field.id)
        if value is None:
            value = initial_value(form_field)
        if state.is_required(form_field.id) and is_empty(form_field, value):
            result.failures.append(
                ValidationFailure(
                    field_id=form_field.id,
                    label=form_field.label,
                    message=settings.required_message,
                )
            )
        result.payload[form_field.id] = value

    if result.failures:
        logger.info("Submission blocked: %d required field(s) empty", len(result.failures))
    return result


class FormSession:
    """
    A form being filled in, for preview or live submission.

    Derived state is recomputed in full after every value change.

    Example:
        >>> session = FormSession.preview(design)
        >>> session.set_value("field_type", "Hardware")
        >>> session.render()
    """

    def __init__(
        self,
        design: FormDesign,
        values: Mapping[str, Any] | None = None,
        settings: RuntimeSettings | None = None,
    ):
        self.design = design
        self.settings = settings or RuntimeSettings()
        self._values: dict[str, Any] = dict(values or {})
        self._errors: dict[str, str] = {}
        self._state = evaluate(design, self._values)

    @classmethod
    def preview(cls, design: FormDesign, settings: RuntimeSettings | None = None) -> FormSession:
        """Authoring preview, starting from an empty value map."""
        return cls(design, {}, settings=settings)

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    @property
    def state(self) -> DerivedState:
        return self._state

    @property
    def errors(self) -> dict[str, str]:
        """Per-field errors from the last ``validate``, cleared as fields change."""
        return dict(self._errors)

    def set_value(self, field_id: str, value: Any) -> DerivedState:
        if field_id not in self.design.fields:
            logger.debug("Ignoring value for unknown field '%s'", field_id)
            return self._state
        self._values[field_id] = value
        self._errors.pop(field_id, None)
        self._state = evaluate(self.design, self._values)
        return self._state

    def set_values(self, values: Mapping[str, Any]) -> DerivedState:
        for field_id, value in values.items():
            if field_id in self.design.fields:
                self._values[field_id] = value
                self._errors.pop(field_id, None)
        self._state = evaluate(self.design, self._values)
        return self._state

    def render(self) -> RenderedForm:
        return render(self.design, self._values, self._state)

    def validate(self) -> SubmissionResult:
        result = validate_submission(
            self.design, self._values, state=self._state, settings=self.settings
        )
        self._errors = result.errors
        return result

    def submit(self) -> dict[str, Any]:
        """Validated payload.

        Raises:
            SubmissionRejected: If a visible required field is empty.
        """
        result = self.validate()
        result.raise_for_errors()
        return result.payload
