"""
Section and design types for the Formwright IR.

The design is an arena: ``fields`` maps ids to field records, and sections
and rules refer to fields by id only. Ordering lives in
``sections[].field_ids``, never in the field map.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..errors import make_load_error
from .fields import IR_MODEL_CONFIG, FormField
from .routing import RoutingRule

DEFAULT_SECTION_ID = "section_default"


class FormSection(BaseModel):
    """
    An ordered, named group of fields.

    Attributes:
        id: Section identifier
        title: Heading shown above the group
        description: Optional explanatory text
        collapsed: Display-only folding state
        field_ids: Ids of the owned fields, in display order
    """

    id: str
    title: str = "New Section"
    description: str | None = None
    collapsed: bool = False
    field_ids: list[str] = Field(default_factory=list)

    model_config = IR_MODEL_CONFIG


class FormDesign(BaseModel):
    """
    The full definition of one dynamic form.

    Attributes:
        sections: Sections in top-to-bottom order
        fields: Field arena keyed by field id
        routing: Rules, applied in list order
    """

    sections: list[FormSection] = Field(default_factory=list)
    fields: dict[str, FormField] = Field(default_factory=dict)
    routing: list[RoutingRule] = Field(default_factory=list)

    model_config = IR_MODEL_CONFIG

    @model_validator(mode="after")
    def _keys_match_ids(self) -> FormDesign:
        for key, field in self.fields.items():
            if key != field.id:
                raise ValueError(f"field key '{key}' does not match field id '{field.id}'")
        return self

    # ------------------------------------------------------------------
    # Lookups (ids are resolved through the arena and may be stale)
    # ------------------------------------------------------------------

    def get_field(self, field_id: str) -> FormField | None:
        return self.fields.get(field_id)

    def get_section(self, section_id: str) -> FormSection | None:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def section_index(self, section_id: str) -> int | None:
        for index, section in enumerate(self.sections):
            if section.id == section_id:
                return index
        return None

    def get_rule(self, rule_id: str) -> RoutingRule | None:
        for rule in self.routing:
            if rule.id == rule_id:
                return rule
        return None

    def ordered_fields(self) -> list[FormField]:
        """Fields in layout order (section order, then position within section)."""
        ordered: list[FormField] = []
        for section in self.sections:
            for field_id in section.field_ids:
                field = self.fields.get(field_id)
                if field is not None:
                    ordered.append(field)
        return ordered

    def rules_referencing(self, field_id: str) -> list[RoutingRule]:
        return [rule for rule in self.routing if rule.references(field_id)]

    # ------------------------------------------------------------------
    # Persisted document shape
    # ------------------------------------------------------------------

    def to_document(self) -> dict[str, Any]:
        """Dump to the persisted camelCase shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_document(), indent=indent)

    @classmethod
    def from_document(cls, data: Any, source: Path | None = None) -> FormDesign:
        """Validate a persisted document.

        Raises:
            DesignLoadError: If the document does not describe a form design.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise make_load_error(first["msg"], source=source, location=location or None) from e

    @classmethod
    def from_json(cls, text: str, source: Path | None = None) -> FormDesign:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise make_load_error(f"invalid JSON: {e.msg}", source=source) from e
        return cls.from_document(data, source=source)


def default_design() -> FormDesign:
    """The starting design offered to a new service form."""
    return FormDesign(
        sections=[
            FormSection(
                id=DEFAULT_SECTION_ID,
                title="General Information",
                description="Please provide the following information",
            )
        ]
    )
