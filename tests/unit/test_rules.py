"""Tests for routing rule authoring and rule summaries."""

from __future__ import annotations

from formwright.core import ir, rules
from formwright.core.invariants import is_consistent


def _cond(source: str, value: str = "", operator: str = "equals") -> ir.RoutingCondition:
    return ir.RoutingCondition(source_field_id=source, operator=operator, value=value)


class TestCandidates:
    def test_sources_exclude_layout_fields(self, request_design: ir.FormDesign) -> None:
        ids = [f.id for f in rules.condition_source_fields(request_design)]
        assert "intro" not in ids
        assert ids[0] == "category"

    def test_targets_include_everything(self, request_design: ir.FormDesign) -> None:
        assert len(rules.rule_target_fields(request_design)) == len(request_design.fields)


class TestAddRule:
    def test_default_condition(self, request_design: ir.FormDesign) -> None:
        design = rules.add_rule(request_design, ["phone"], rule_id="new")
        rule = design.get_rule("new")
        assert rule is not None
        assert rule.conditions == [_cond("category")]
        assert rule.action == ir.RoutingAction.SHOW
        assert rule.logic_operator == ir.LogicOperator.AND
        assert design.routing[-1].id == "new"

    def test_explicit_rule(self, request_design: ir.FormDesign) -> None:
        design = rules.add_rule(
            request_design,
            ["phone"],
            conditions=[_cond("email", "@corp", "endsWith")],
            action="hide",
            logic_operator="OR",
            rule_id="new",
        )
        rule = design.get_rule("new")
        assert rule.action == ir.RoutingAction.HIDE
        assert rule.logic_operator == ir.LogicOperator.OR

    def test_duplicate_targets_collapsed(self, request_design: ir.FormDesign) -> None:
        design = rules.add_rule(request_design, ["phone", "phone"], rule_id="new")
        assert design.get_rule("new").target_field_ids == ["phone"]

    def test_rejects_missing_targets(self, request_design: ir.FormDesign) -> None:
        assert rules.add_rule(request_design, []) is request_design
        assert rules.add_rule(request_design, ["ghost"]) is request_design

    def test_rejects_unknown_or_display_source(self, request_design: ir.FormDesign) -> None:
        assert rules.add_rule(request_design, ["phone"], conditions=[_cond("ghost")]) is (
            request_design
        )
        assert rules.add_rule(request_design, ["phone"], conditions=[_cond("intro")]) is (
            request_design
        )

    def test_rejects_bad_action(self, request_design: ir.FormDesign) -> None:
        assert rules.add_rule(request_design, ["phone"], action="explode") is request_design

    def test_no_source_fields(self) -> None:
        design = ir.FormDesign(
            sections=[ir.FormSection(id="s", field_ids=["h"])],
            fields={"h": ir.DisplayField(id="h", kind="heading", section_id="s")},
        )
        assert rules.add_rule(design, ["h"]) is design


class TestEditRule:
    def test_update_rule(self, request_design: ir.FormDesign) -> None:
        design = rules.update_rule(
            request_design, "require_other", {"action": "hide", "targetFieldIds": ["phone"]}
        )
        rule = design.get_rule("require_other")
        assert rule.action == ir.RoutingAction.HIDE
        assert rule.target_field_ids == ["phone"]
        assert [r.id for r in design.routing] == [r.id for r in request_design.routing]

    def test_update_rule_rejects_empty_targets(self, request_design: ir.FormDesign) -> None:
        assert rules.update_rule(request_design, "require_other", {"targetFieldIds": []}) is (
            request_design
        )

    def test_remove_rule(self, request_design: ir.FormDesign) -> None:
        design = rules.remove_rule(request_design, "hide_other")
        assert [r.id for r in design.routing] == ["require_other", "bulk_contact"]
        assert rules.remove_rule(design, "hide_other") is design

    def test_move_rule(self, request_design: ir.FormDesign) -> None:
        design = rules.move_rule(request_design, 0, 2)
        assert [r.id for r in design.routing] == ["require_other", "bulk_contact", "hide_other"]
        assert rules.move_rule(request_design, 1, 1) is request_design

    def test_conditions(self, request_design: ir.FormDesign) -> None:
        design = rules.add_condition(request_design, "require_other", _cond("phone", "1"))
        assert len(design.get_rule("require_other").conditions) == 2

        design = rules.update_condition(design, "require_other", 1, {"operator": "startsWith"})
        assert design.get_rule("require_other").conditions[1].operator == "startsWith"

        design = rules.remove_condition(design, "require_other", 0)
        assert design.get_rule("require_other").source_field_ids == ["phone"]
        assert is_consistent(design)

    def test_last_condition_cannot_be_removed(self, request_design: ir.FormDesign) -> None:
        assert rules.remove_condition(request_design, "require_other", 0) is request_design

    def test_condition_index_out_of_range(self, request_design: ir.FormDesign) -> None:
        assert rules.update_condition(request_design, "require_other", 5, {"value": "x"}) is (
            request_design
        )
        assert rules.remove_condition(request_design, "bulk_contact", 9) is request_design


class TestDescribe:
    def test_scenario_summary(self, scenario_design: ir.FormDesign) -> None:
        summary = rules.describe_rule(scenario_design, scenario_design.routing[0])
        assert summary == 'Make required Details when Urgent equals "yes"'

    def test_multi_condition_summary(self, request_design: ir.FormDesign) -> None:
        summary = rules.describe_rule(request_design, request_design.get_rule("bulk_contact"))
        assert summary == (
            'Make required Email Address, I agree when Quantity is greater than "10" '
            'AND Category equals "Hardware"'
        )

    def test_dangling_ids_labelled_unknown(self) -> None:
        design = ir.FormDesign()
        rule = ir.RoutingRule(
            id="r", conditions=[_cond("gone", "x")], action="skip", target_field_ids=["gone"]
        )
        assert rules.describe_rule(design, rule) == (
            'Skip to section Unknown field when Unknown field equals "x"'
        )
