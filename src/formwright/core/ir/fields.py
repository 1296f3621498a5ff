"""
Field types for the Formwright IR.

A field is a tagged variant over ``kind``: every field shares a base record
(id, label, required, width, help text, owning section) and carries only the
payload its kind needs. Choice kinds hold ``options``, input kinds hold a
``placeholder``, display kinds hold nothing extra.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

IR_MODEL_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FieldKind(StrEnum):
    """Every kind of field a form can contain."""

    TEXT = "text"
    MULTILINE_TEXT = "multiline-text"
    NUMBER = "number"
    EMAIL = "email"
    PHONE = "phone"
    DATE = "date"
    FILE = "file"
    SINGLE_SELECT = "single-select"
    CHECKBOX = "checkbox"
    RADIO_GROUP = "radio-group"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    SECTION_DIVIDER = "section-divider"

    @property
    def is_choice(self) -> bool:
        """Kinds whose value is picked from ``options``."""
        return self in CHOICE_KINDS

    @property
    def is_display(self) -> bool:
        """Layout-only kinds that capture no value."""
        return self in DISPLAY_KINDS


CHOICE_KINDS = frozenset({FieldKind.SINGLE_SELECT, FieldKind.RADIO_GROUP})
DISPLAY_KINDS = frozenset({FieldKind.HEADING, FieldKind.PARAGRAPH, FieldKind.SECTION_DIVIDER})


class FieldWidth(StrEnum):
    """Layout width hint."""

    FULL = "full"
    HALF = "half"
    THIRD = "third"


class FieldBase(BaseModel):
    """
    Attributes shared by every field kind.

    Attributes:
        id: Stable identifier, never reused after deletion
        label: Display label (the body text for headings and paragraphs)
        help_text: Optional hint shown under the control
        required: Author-set baseline; routing may raise it, never lower it
        width: Layout hint, purely cosmetic
        section_id: Owning section
    """

    id: str
    label: str = ""
    help_text: str | None = None
    required: bool = False
    width: FieldWidth = FieldWidth.FULL
    section_id: str

    model_config = IR_MODEL_CONFIG

    @property
    def field_kind(self) -> FieldKind:
        return FieldKind(self.kind)  # type: ignore[attr-defined]

    @property
    def captures_value(self) -> bool:
        """Whether this field contributes a value to a submission."""
        return not self.field_kind.is_display


class TextField(FieldBase):
    """Free-form input: text, multi-line text, number, email, phone, date, file."""

    kind: Literal["text", "multiline-text", "number", "email", "phone", "date", "file"]
    placeholder: str | None = None


class ChoiceField(FieldBase):
    """Single selection from an ordered option list (dropdown or radio group)."""

    kind: Literal["single-select", "radio-group"]
    placeholder: str | None = None
    options: list[str] = Field(default_factory=list)


class CheckboxField(FieldBase):
    """A single boolean box; the boxed state is the value."""

    kind: Literal["checkbox"]


class DisplayField(FieldBase):
    """Heading, paragraph or divider. Rendered, never submitted."""

    kind: Literal["heading", "paragraph", "section-divider"]


FormField = Annotated[
    Union[TextField, ChoiceField, CheckboxField, DisplayField],
    Field(discriminator="kind"),
]

form_field_adapter: TypeAdapter[FormField] = TypeAdapter(FormField)


def parse_field(data: dict) -> FormField:
    """Validate a field document (camelCase or snake_case keys) into its variant."""
    return form_field_adapter.validate_python(data)


def field_options(field: FormField) -> list[str]:
    """Options of a choice field, empty for every other kind."""
    if isinstance(field, ChoiceField):
        return list(field.options)
    return []
