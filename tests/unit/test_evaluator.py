"""Tests for the routing rule evaluator.

Covers:
- Baseline state with no rules
- Every condition operator, including non-string and non-numeric values
- AND/OR combination and vacuous rules
- Rule order precedence
- Dangling references
- Determinism
"""

from __future__ import annotations

import pytest

from formwright.core import ir
from formwright.core.evaluator import (
    as_text,
    baseline_state,
    condition_holds,
    evaluate,
    to_number,
)


def _design(*rules: ir.RoutingRule) -> ir.FormDesign:
    return ir.FormDesign(
        sections=[ir.FormSection(id="s", field_ids=["src", "box", "t"])],
        fields={
            "src": ir.TextField(id="src", kind="text", section_id="s"),
            "box": ir.CheckboxField(id="box", kind="checkbox", section_id="s"),
            "t": ir.TextField(id="t", kind="text", required=False, section_id="s"),
        },
        routing=list(rules),
    )


def _rule(
    rule_id: str,
    action: str,
    conditions: list[ir.RoutingCondition],
    logic: str = "AND",
    targets: list[str] | None = None,
) -> ir.RoutingRule:
    return ir.RoutingRule(
        id=rule_id,
        conditions=conditions,
        logic_operator=logic,
        action=action,
        target_field_ids=targets if targets is not None else ["t"],
    )


def _cond(operator: str, value: str, source: str = "src") -> ir.RoutingCondition:
    return ir.RoutingCondition(source_field_id=source, operator=operator, value=value)


ALWAYS = _cond("equals", "")  # src is empty unless set


class TestBaseline:
    def test_no_rules(self, request_design: ir.FormDesign) -> None:
        plain = request_design.model_copy(update={"routing": []})
        state = evaluate(plain, {"category": "Other", "quantity": "50"})
        for field in plain.fields.values():
            assert state.is_visible(field.id) is True
            assert state.is_required(field.id) is field.required
        assert state == baseline_state(plain)

    def test_state_covers_every_field(self, request_design: ir.FormDesign) -> None:
        state = evaluate(request_design)
        assert set(state.fields) == set(request_design.fields)
        assert set(state.visible) == set(state.required) == set(request_design.fields)

    def test_unknown_field_not_visible(self, request_design: ir.FormDesign) -> None:
        state = evaluate(request_design)
        assert state.is_visible("ghost") is False
        assert state.is_required("ghost") is False


class TestScenario:
    def test_require_when_yes(self, scenario_design: ir.FormDesign) -> None:
        assert evaluate(scenario_design, {"B": "yes"}).is_required("A") is True

    @pytest.mark.parametrize("values", [{"B": "no"}, {}, {"B": None}])
    def test_not_required_otherwise(self, scenario_design: ir.FormDesign, values: dict) -> None:
        assert evaluate(scenario_design, values).is_required("A") is False


class TestOperators:
    @pytest.mark.parametrize(
        ("operator", "expected", "value", "result"),
        [
            ("equals", "abc", "abc", True),
            ("equals", "abc", "ABC", False),
            ("notEquals", "abc", "abd", True),
            ("notEquals", "abc", "abc", False),
            ("contains", "b", "abc", True),
            ("contains", "B", "abc", False),
            ("notContains", "z", "abc", True),
            ("notContains", "b", "abc", False),
            ("startsWith", "ab", "abc", True),
            ("startsWith", "bc", "abc", False),
            ("endsWith", "bc", "abc", True),
            ("endsWith", "ab", "abc", False),
            ("greaterThan", "10", "11", True),
            ("greaterThan", "10", "10", False),
            ("greaterThan", "10", " 10.5 ", True),
            ("lessThan", "10", "9", True),
            ("lessThan", "10", "10", False),
            ("lessThan", "1e3", "999", True),
        ],
    )
    def test_string_values(self, operator: str, expected: str, value: str, result: bool) -> None:
        design = _design()
        assert condition_holds(design, _cond(operator, expected), {"src": value}) is result

    @pytest.mark.parametrize("operator", ["contains", "notContains", "startsWith", "endsWith"])
    def test_string_operators_false_on_non_strings(self, operator: str) -> None:
        design = _design()
        assert condition_holds(design, _cond(operator, "1"), {"src": 123}) is False
        assert condition_holds(design, _cond(operator, "1"), {"src": ["1"]}) is False

    def test_numeric_values(self) -> None:
        design = _design()
        assert condition_holds(design, _cond("greaterThan", "5"), {"src": 6}) is True
        assert condition_holds(design, _cond("lessThan", "5"), {"src": 4.5}) is True

    @pytest.mark.parametrize("value", ["", "abc", None, True, "nan", "inf", [1]])
    def test_coercion_failure_is_false(self, value: object) -> None:
        design = _design()
        for operator in ("greaterThan", "lessThan"):
            assert condition_holds(design, _cond(operator, "0"), {"src": value}) is False

    def test_non_numeric_condition_value(self) -> None:
        design = _design()
        assert condition_holds(design, _cond("greaterThan", "many"), {"src": "5"}) is False

    def test_equality_on_numbers_and_booleans(self) -> None:
        design = _design()
        assert condition_holds(design, _cond("equals", "3"), {"src": 3}) is True
        assert condition_holds(design, _cond("equals", "3"), {"src": 3.0}) is True
        assert condition_holds(design, _cond("equals", "true", "box"), {"box": True}) is True

    def test_missing_checkbox_is_false(self) -> None:
        design = _design()
        assert condition_holds(design, _cond("equals", "false", "box"), {}) is True

    def test_missing_value_is_empty_string(self) -> None:
        design = _design()
        assert condition_holds(design, _cond("equals", ""), {}) is True
        assert condition_holds(design, _cond("notContains", "x"), {}) is True


class TestCombination:
    def test_and_requires_all(self) -> None:
        design = _design(
            _rule("r", "hide", [_cond("contains", "a"), _cond("contains", "b")], "AND")
        )
        assert evaluate(design, {"src": "ab"}).is_visible("t") is False
        assert evaluate(design, {"src": "a"}).is_visible("t") is True

    def test_or_requires_any(self) -> None:
        design = _design(_rule("r", "hide", [_cond("contains", "a"), _cond("contains", "b")], "OR"))
        assert evaluate(design, {"src": "b"}).is_visible("t") is False
        assert evaluate(design, {"src": "c"}).is_visible("t") is True

    @pytest.mark.parametrize("logic", ["AND", "OR"])
    def test_rule_without_conditions_is_vacuously_true(self, logic: str) -> None:
        design = _design(_rule("r", "hide", [], logic))
        assert evaluate(design, {}).is_visible("t") is False


class TestActions:
    def test_require_never_lowers(self) -> None:
        design = _design(_rule("r", "require", [ALWAYS]))
        required_target = design.model_copy(
            update={
                "fields": {
                    **design.fields,
                    "t": ir.TextField(id="t", kind="text", required=True, section_id="s"),
                }
            }
        )
        assert evaluate(required_target, {"src": "no match"}).is_required("t") is True
        assert evaluate(design, {}).is_required("t") is True

    def test_skip_has_no_effect(self) -> None:
        design = _design(_rule("r", "skip", [ALWAYS]))
        assert evaluate(design, {}) == baseline_state(design)

    def test_show_then_hide_hides(self) -> None:
        design = _design(_rule("show", "show", [ALWAYS]), _rule("hide", "hide", [ALWAYS]))
        assert evaluate(design, {}).is_visible("t") is False

    def test_hide_then_show_shows(self) -> None:
        design = _design(_rule("hide", "hide", [ALWAYS]), _rule("show", "show", [ALWAYS]))
        assert evaluate(design, {}).is_visible("t") is True

    def test_hidden_field_keeps_required_flag(self) -> None:
        design = _design(_rule("req", "require", [ALWAYS]), _rule("hide", "hide", [ALWAYS]))
        state = evaluate(design, {})
        assert state.fields["t"].visible is False
        assert state.fields["t"].required is True


class TestDanglingReferences:
    def test_missing_source_is_false(self) -> None:
        design = _design(_rule("r", "hide", [_cond("equals", "", source="ghost")]))
        assert evaluate(design, {"ghost": ""}).is_visible("t") is True

    def test_missing_source_poisons_and_not_or(self) -> None:
        conditions = [_cond("equals", "", source="ghost"), ALWAYS]
        assert evaluate(_design(_rule("r", "hide", conditions, "AND"))).is_visible("t") is True
        assert evaluate(_design(_rule("r", "hide", conditions, "OR"))).is_visible("t") is False

    def test_missing_target_skipped(self) -> None:
        design = _design(_rule("r", "hide", [ALWAYS], targets=["ghost", "t"]))
        state = evaluate(design, {})
        assert "ghost" not in state.fields
        assert state.is_visible("t") is False


class TestDeterminism:
    def test_same_inputs_same_output(self, request_design: ir.FormDesign) -> None:
        values = {"category": "Hardware", "quantity": "20"}
        assert evaluate(request_design, values) == evaluate(request_design, values)

    def test_no_memory_between_passes(self, request_design: ir.FormDesign) -> None:
        first = evaluate(request_design, {"category": "Other"})
        evaluate(request_design, {"category": "Hardware", "quantity": "99"})
        assert evaluate(request_design, {"category": "Other"}) == first

    def test_inputs_not_mutated(self, request_design: ir.FormDesign) -> None:
        snapshot = request_design.model_dump()
        values = {"category": "Hardware"}
        evaluate(request_design, values)
        assert request_design.model_dump() == snapshot
        assert values == {"category": "Hardware"}


class TestRequestForm:
    def test_other_hidden_until_selected(self, request_design: ir.FormDesign) -> None:
        state = evaluate(request_design, {"category": "Software"})
        assert state.is_visible("other") is False
        state = evaluate(request_design, {"category": "Other"})
        assert state.is_visible("other") is True
        assert state.is_required("other") is True

    def test_bulk_hardware_requires_contact(self, request_design: ir.FormDesign) -> None:
        state = evaluate(request_design, {"category": "Hardware", "quantity": 12})
        assert state.is_required("email") is True
        assert state.is_required("agree") is True
        state = evaluate(request_design, {"category": "Software", "quantity": 12})
        assert state.is_required("email") is False


class TestHelpers:
    def test_as_text(self) -> None:
        assert as_text(False) == "false"
        assert as_text(2.0) == "2"
        assert as_text(2.5) == "2.5"

    def test_to_number(self) -> None:
        assert to_number("  7 ") == 7.0
        assert to_number(False) is None
        assert to_number("") is None
        assert to_number(object()) is None
