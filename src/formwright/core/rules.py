"""
Routing rule authoring.

Pure operations that add, edit, reorder and remove routing rules on a
design, plus the plain-language summaries shown in the rule list. Like the
structural editor, an operation that would reference an unknown field or
leave a rule without conditions or targets returns the design unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from .editor import new_id
from .errors import ErrorKind
from .ir import (
    ConditionOperator,
    FormDesign,
    FormField,
    LogicOperator,
    RoutingAction,
    RoutingCondition,
    RoutingRule,
)

logger = logging.getLogger(__name__)

OPERATOR_LABELS: dict[ConditionOperator, str] = {
    ConditionOperator.EQUALS: "equals",
    ConditionOperator.NOT_EQUALS: "does not equal",
    ConditionOperator.CONTAINS: "contains",
    ConditionOperator.NOT_CONTAINS: "does not contain",
    ConditionOperator.GREATER_THAN: "is greater than",
    ConditionOperator.LESS_THAN: "is less than",
    ConditionOperator.STARTS_WITH: "starts with",
    ConditionOperator.ENDS_WITH: "ends with",
}

ACTION_LABELS: dict[RoutingAction, str] = {
    RoutingAction.SHOW: "Show",
    RoutingAction.HIDE: "Hide",
    RoutingAction.REQUIRE: "Make required",
    RoutingAction.SKIP: "Skip to section",
}

UNKNOWN_FIELD_LABEL = "Unknown field"

_RULE_KEYS = {
    "conditions": "conditions",
    "logic_operator": "logic_operator",
    "logicOperator": "logic_operator",
    "action": "action",
    "target_field_ids": "target_field_ids",
    "targetFieldIds": "target_field_ids",
}
_CONDITION_KEYS = {
    "source_field_id": "source_field_id",
    "sourceFieldId": "source_field_id",
    "operator": "operator",
    "value": "value",
}


def condition_source_fields(design: FormDesign) -> list[FormField]:
    """Fields a condition may test: everything that captures a value."""
    return [f for f in design.ordered_fields() if f.captures_value]


def rule_target_fields(design: FormDesign) -> list[FormField]:
    """Fields a rule may act on, in layout order."""
    return design.ordered_fields()


def _unchanged(operation: str, detail: str, design: FormDesign) -> FormDesign:
    logger.debug("%s: %s: %s", operation, ErrorKind.INVALID_TARGET, detail)
    return design


def _problem(design: FormDesign, rule: RoutingRule) -> str | None:
    """Why ``rule`` may not be stored in ``design``, or None if it may."""
    if not rule.conditions:
        return f"rule '{rule.id}' has no conditions"
    if not rule.target_field_ids:
        return f"rule '{rule.id}' has no targets"
    for condition in rule.conditions:
        source = design.get_field(condition.source_field_id)
        if source is None:
            return f"unknown source field '{condition.source_field_id}'"
        if not source.captures_value:
            return f"field '{source.id}' captures no value"
    for target in rule.target_field_ids:
        if target not in design.fields:
            return f"unknown target field '{target}'"
    return None


def _default_condition(design: FormDesign) -> RoutingCondition | None:
    sources = condition_source_fields(design)
    if not sources:
        return None
    return RoutingCondition(source_field_id=sources[0].id)


def _store(design: FormDesign, operation: str, rule: RoutingRule) -> FormDesign:
    problem = _problem(design, rule)
    if problem:
        return _unchanged(operation, problem, design)
    existing = design.get_rule(rule.id)
    if existing == rule:
        return design
    if existing is None:
        routing = [*design.routing, rule]
    else:
        routing = [rule if r.id == rule.id else r for r in design.routing]
    return design.model_copy(update={"routing": routing})


def add_rule(
    design: FormDesign,
    target_field_ids: Sequence[str],
    *,
    conditions: Iterable[RoutingCondition] | None = None,
    logic_operator: LogicOperator | str = LogicOperator.AND,
    action: RoutingAction | str = RoutingAction.SHOW,
    rule_id: str | None = None,
) -> FormDesign:
    """Append a rule acting on ``target_field_ids``.

    Without explicit ``conditions`` the rule starts with a single
    ``equals ""`` condition on the first field that captures a value.
    """
    if rule_id is not None and design.get_rule(rule_id) is not None:
        return _unchanged("add_rule", f"rule id '{rule_id}' already in use", design)
    if conditions is None:
        default = _default_condition(design)
        condition_list = [default] if default else []
    else:
        condition_list = list(conditions)
    try:
        rule = RoutingRule(
            id=rule_id or new_id("rule", {r.id for r in design.routing}),
            conditions=condition_list,
            logic_operator=LogicOperator(logic_operator),
            action=RoutingAction(action),
            target_field_ids=list(dict.fromkeys(target_field_ids)),
        )
    except ValueError as e:
        return _unchanged("add_rule", str(e), design)
    return _store(design, "add_rule", rule)


def update_rule(design: FormDesign, rule_id: str, updates: Mapping[str, Any]) -> FormDesign:
    """Change a rule's conditions, operator, action or targets."""
    rule = design.get_rule(rule_id)
    if rule is None:
        return _unchanged("update_rule", f"unknown rule '{rule_id}'", design)
    merged = rule.model_dump()
    for key, value in updates.items():
        name = _RULE_KEYS.get(key)
        if name is None:
            logger.debug("update_rule: ignoring key '%s'", key)
            continue
        merged[name] = value
    try:
        updated = RoutingRule.model_validate(merged)
    except ValidationError as e:
        return _unchanged("update_rule", f"rejected update for '{rule_id}': {e}", design)
    return _store(design, "update_rule", updated)


def remove_rule(design: FormDesign, rule_id: str) -> FormDesign:
    if design.get_rule(rule_id) is None:
        return _unchanged("remove_rule", f"unknown rule '{rule_id}'", design)
    return design.model_copy(update={"routing": [r for r in design.routing if r.id != rule_id]})


def move_rule(design: FormDesign, from_index: int, to_index: int) -> FormDesign:
    """Reorder rules; later rules take precedence over earlier ones."""
    count = len(design.routing)
    if not 0 <= from_index < count:
        return _unchanged("move_rule", f"no rule at index {from_index}", design)
    destination = max(0, min(to_index, count - 1))
    if destination == from_index:
        return design
    routing = list(design.routing)
    routing.insert(destination, routing.pop(from_index))
    return design.model_copy(update={"routing": routing})


def add_condition(
    design: FormDesign,
    rule_id: str,
    condition: RoutingCondition | None = None,
) -> FormDesign:
    """Append a condition (default: ``equals ""`` on the first source field)."""
    rule = design.get_rule(rule_id)
    if rule is None:
        return _unchanged("add_condition", f"unknown rule '{rule_id}'", design)
    condition = condition or _default_condition(design)
    if condition is None:
        return _unchanged("add_condition", "design has no field to test", design)
    updated = rule.model_copy(update={"conditions": [*rule.conditions, condition]})
    return _store(design, "add_condition", updated)


def update_condition(
    design: FormDesign,
    rule_id: str,
    index: int,
    updates: Mapping[str, Any],
) -> FormDesign:
    rule = design.get_rule(rule_id)
    if rule is None:
        return _unchanged("update_condition", f"unknown rule '{rule_id}'", design)
    if not 0 <= index < len(rule.conditions):
        return _unchanged("update_condition", f"no condition at index {index}", design)
    merged = rule.conditions[index].model_dump()
    for key, value in updates.items():
        name = _CONDITION_KEYS.get(key)
        if name is None:
            logger.debug("update_condition: ignoring key '%s'", key)
            continue
        merged[name] = value
    try:
        condition = RoutingCondition.model_validate(merged)
    except ValidationError as e:
        return _unchanged("update_condition", str(e), design)
    conditions = list(rule.conditions)
    conditions[index] = condition
    return _store(design, "update_condition", rule.model_copy(update={"conditions": conditions}))


def remove_condition(design: FormDesign, rule_id: str, index: int) -> FormDesign:
    """Remove a condition. The last remaining condition cannot be removed."""
    rule = design.get_rule(rule_id)
    if rule is None:
        return _unchanged("remove_condition", f"unknown rule '{rule_id}'", design)
    if not 0 <= index < len(rule.conditions):
        return _unchanged("remove_condition", f"no condition at index {index}", design)
    if len(rule.conditions) == 1:
        return _unchanged("remove_condition", f"rule '{rule_id}' needs a condition", design)
    conditions = [c for i, c in enumerate(rule.conditions) if i != index]
    return _store(design, "remove_condition", rule.model_copy(update={"conditions": conditions}))


def _label(design: FormDesign, field_id: str) -> str:
    field = design.get_field(field_id)
    return field.label if field is not None else UNKNOWN_FIELD_LABEL


def describe_condition(design: FormDesign, condition: RoutingCondition) -> str:
    operator = OPERATOR_LABELS[condition.operator]
    return f'{_label(design, condition.source_field_id)} {operator} "{condition.value}"'


def describe_rule(design: FormDesign, rule: RoutingRule) -> str:
    """One-line summary, e.g. ``Show Details when Type equals "Other"``."""
    targets = ", ".join(_label(design, t) for t in rule.target_field_ids)
    joiner = f" {rule.logic_operator.value} "
    conditions = joiner.join(describe_condition(design, c) for c in rule.conditions)
    summary = f"{ACTION_LABELS[rule.action]} {targets}".rstrip()
    if conditions:
        summary += f" when {conditions}"
    return summary
