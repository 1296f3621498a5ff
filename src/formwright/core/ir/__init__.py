"""
Formwright Intermediate Representation (IR) types.

The in-memory form design model: fields, sections, routing rules and the
design aggregate that holds them. All types are frozen pydantic models and
serialize to the persisted camelCase document shape.
"""

from .design import (
    DEFAULT_SECTION_ID,
    FormDesign,
    FormSection,
    default_design,
)
from .fields import (
    CHOICE_KINDS,
    DISPLAY_KINDS,
    CheckboxField,
    ChoiceField,
    DisplayField,
    FieldBase,
    FieldKind,
    FieldWidth,
    FormField,
    TextField,
    field_options,
    form_field_adapter,
    parse_field,
)
from .routing import (
    ConditionOperator,
    LogicOperator,
    RoutingAction,
    RoutingCondition,
    RoutingRule,
)

__all__ = [
    # Fields
    "CHOICE_KINDS",
    "DISPLAY_KINDS",
    "CheckboxField",
    "ChoiceField",
    "DisplayField",
    "FieldBase",
    "FieldKind",
    "FieldWidth",
    "FormField",
    "TextField",
    "field_options",
    "form_field_adapter",
    "parse_field",
    # Routing
    "ConditionOperator",
    "LogicOperator",
    "RoutingAction",
    "RoutingCondition",
    "RoutingRule",
    # Design
    "DEFAULT_SECTION_ID",
    "FormDesign",
    "FormSection",
    "default_design",
]
