"""
Routing rule types for the Formwright IR.

A routing rule is a flat list of conditions joined by a single logical
operator, and one action applied to a list of target fields when the
combined condition holds.
"""

from __future__ import annotations

from collections.abc import Collection
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .fields import IR_MODEL_CONFIG


class ConditionOperator(StrEnum):
    """Comparison applied between a field value and a condition value."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"

    @property
    def is_numeric(self) -> bool:
        return self in (ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN)


class LogicOperator(StrEnum):
    """Combinator applied across all conditions of one rule."""

    AND = "AND"
    OR = "OR"


class RoutingAction(StrEnum):
    """Effect of a rule on its targets."""

    SHOW = "show"
    HIDE = "hide"
    REQUIRE = "require"
    SKIP = "skip"  # reserved for section jumps; no effect on derived state


class RoutingCondition(BaseModel):
    """
    One comparison inside a routing rule.

    Examples:
        - request_type equals "Hardware"
        - quantity greaterThan "5"
    """

    source_field_id: str
    operator: ConditionOperator = ConditionOperator.EQUALS
    value: str = ""

    model_config = IR_MODEL_CONFIG

    @field_validator("value", mode="before")
    @classmethod
    def coerce_scalar_value(cls, v: Any) -> Any:
        """Stored values are strings; accept plain scalars from older documents."""
        if v is None:
            return ""
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, int | float):
            return str(v)
        return v


class RoutingRule(BaseModel):
    """
    A conditional statement altering visibility or required-ness of fields.

    Attributes:
        id: Rule identifier
        conditions: Ordered comparisons, never empty when produced by the editor
        logic_operator: AND (all conditions) or OR (any condition)
        action: What happens to the targets when the conditions hold
        target_field_ids: Fields the action applies to
    """

    id: str
    conditions: list[RoutingCondition] = Field(default_factory=list)
    logic_operator: LogicOperator = LogicOperator.AND
    action: RoutingAction = RoutingAction.SHOW
    target_field_ids: list[str] = Field(default_factory=list)

    model_config = IR_MODEL_CONFIG

    @property
    def source_field_ids(self) -> list[str]:
        return [c.source_field_id for c in self.conditions]

    @property
    def is_empty(self) -> bool:
        """A rule with nothing to test or nothing to act on."""
        return not self.conditions or not self.target_field_ids

    def references(self, field_id: str) -> bool:
        return field_id in self.target_field_ids or field_id in self.source_field_ids

    def without_fields(self, field_ids: Collection[str]) -> RoutingRule | None:
        """Drop conditions and targets mentioning ``field_ids``.

        Returns None when the pruned rule would have no conditions or no
        targets left.
        """
        conditions = [c for c in self.conditions if c.source_field_id not in field_ids]
        targets = [t for t in self.target_field_ids if t not in field_ids]
        if not conditions or not targets:
            return None
        if len(conditions) == len(self.conditions) and len(targets) == len(
            self.target_field_ids
        ):
            return self
        return self.model_copy(update={"conditions": conditions, "target_field_ids": targets})
