"""
Routing rule evaluator.

Computes the derived ``visible``/``required`` state of every field for a
given value map by replaying the design's routing rules in list order.

Pure evaluation: same design and values always give the same state, the
design is never modified, and nothing is remembered between calls. Stale
references degrade instead of raising:
    - a condition on a missing field is false (``dangling_reference``)
    - a missing target is skipped (``dangling_reference``)
    - a numeric comparison on a non-number is false (``coercion_failure``)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from .errors import ErrorKind
from .ir import (
    ConditionOperator,
    FieldKind,
    FormDesign,
    LogicOperator,
    RoutingAction,
    RoutingCondition,
    RoutingRule,
)

logger = logging.getLogger(__name__)


class FieldState(BaseModel):
    """Derived state of one field."""

    visible: bool = True
    required: bool = False

    model_config = ConfigDict(frozen=True)


class DerivedState(BaseModel):
    """
    Result of one evaluation pass.

    Attributes:
        fields: Field id -> derived state, for every field in the design
    """

    fields: dict[str, FieldState]

    model_config = ConfigDict(frozen=True)

    def is_visible(self, field_id: str) -> bool:
        state = self.fields.get(field_id)
        return state.visible if state else False

    def is_required(self, field_id: str) -> bool:
        state = self.fields.get(field_id)
        return state.required if state else False

    @property
    def visible(self) -> dict[str, bool]:
        return {k: v.visible for k, v in self.fields.items()}

    @property
    def required(self) -> dict[str, bool]:
        return {k: v.required for k, v in self.fields.items()}


def baseline_state(design: FormDesign) -> DerivedState:
    """Everything visible, required as the author set it."""
    return DerivedState(
        fields={f.id: FieldState(visible=True, required=f.required) for f in design.fields.values()}
    )


def evaluate(design: FormDesign, values: Mapping[str, Any] | None = None) -> DerivedState:
    """Evaluate all routing rules against ``values``.

    Args:
        design: Form design (read-only).
        values: Field id -> captured value. Absent fields count as empty.

    Returns:
        Derived state for every field in the design.
    """
    values = values or {}
    visible = {f.id: True for f in design.fields.values()}
    required = {f.id: f.required for f in design.fields.values()}

    for rule in design.routing:
        if not rule_matches(design, rule, values):
            continue
        for target in rule.target_field_ids:
            if target not in visible:
                logger.debug(
                    "Rule '%s': %s: target '%s'", rule.id, ErrorKind.DANGLING_REFERENCE, target
                )
                continue
            if rule.action == RoutingAction.SHOW:
                visible[target] = True
            elif rule.action == RoutingAction.HIDE:
                visible[target] = False
            elif rule.action == RoutingAction.REQUIRE:
                required[target] = True
            # SKIP is a navigation hint with no effect on field state

    return DerivedState(
        fields={
            field_id: FieldState(visible=visible[field_id], required=required[field_id])
            for field_id in visible
        }
    )


def rule_matches(design: FormDesign, rule: RoutingRule, values: Mapping[str, Any]) -> bool:
    """Combine a rule's conditions with its logic operator.

    A rule with no conditions is vacuously true.
    """
    results = (condition_holds(design, c, values) for c in rule.conditions)
    if rule.logic_operator == LogicOperator.OR:
        return any(results) if rule.conditions else True
    return all(results)


def current_value(design: FormDesign, field_id: str, values: Mapping[str, Any]) -> Any:
    """A field's captured value, with absent/None meaning empty (False for checkboxes)."""
    value = values.get(field_id)
    if value is not None:
        return value
    field = design.get_field(field_id)
    if field is not None and field.field_kind == FieldKind.CHECKBOX:
        return False
    return ""


def condition_holds(
    design: FormDesign, condition: RoutingCondition, values: Mapping[str, Any]
) -> bool:
    """Apply one condition's operator to the source field's current value."""
    if condition.source_field_id not in design.fields:
        logger.debug(
            "%s: condition source '%s'", ErrorKind.DANGLING_REFERENCE, condition.source_field_id
        )
        return False

    value = current_value(design, condition.source_field_id, values)
    expected = condition.value
    op = condition.operator

    if op == ConditionOperator.EQUALS:
        return as_text(value) == expected
    if op == ConditionOperator.NOT_EQUALS:
        return as_text(value) != expected
    if op.is_numeric:
        left, right = to_number(value), to_number(expected)
        if left is None or right is None:
            logger.debug(
                "%s: %r %s %r", ErrorKind.COERCION_FAILURE, value, op.value, expected
            )
            return False
        if op == ConditionOperator.GREATER_THAN:
            return left > right
        return left < right

    # Remaining operators are string operations, false on non-strings
    if not isinstance(value, str):
        return False
    if op == ConditionOperator.CONTAINS:
        return expected in value
    if op == ConditionOperator.NOT_CONTAINS:
        return expected not in value
    if op == ConditionOperator.STARTS_WITH:
        return value.startswith(expected)
    if op == ConditionOperator.ENDS_WITH:
        return value.endswith(expected)
    return False


def as_text(value: Any) -> str:
    """Text form used for equality against the stored condition value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> float | None:
    """Best-effort numeric coercion; None when the value is not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None
