"""Shared pytest fixtures for Formwright tests."""

from __future__ import annotations

import pytest

from formwright.core import ir


def make_design(
    sections: list[ir.FormSection],
    fields: list[ir.FormField],
    routing: list[ir.RoutingRule] | None = None,
) -> ir.FormDesign:
    return ir.FormDesign(
        sections=sections,
        fields={f.id: f for f in fields},
        routing=routing or [],
    )


@pytest.fixture
def scenario_design() -> ir.FormDesign:
    """Section S1 with A (text) and B (yes/no select); require A when B is yes."""
    return make_design(
        sections=[ir.FormSection(id="S1", title="Request", field_ids=["A", "B"])],
        fields=[
            ir.TextField(id="A", kind="text", label="Details", section_id="S1"),
            ir.ChoiceField(
                id="B", kind="single-select", label="Urgent", options=["yes", "no"], section_id="S1"
            ),
        ],
        routing=[
            ir.RoutingRule(
                id="r1",
                conditions=[
                    ir.RoutingCondition(
                        source_field_id="B", operator=ir.ConditionOperator.EQUALS, value="yes"
                    )
                ],
                logic_operator=ir.LogicOperator.AND,
                action=ir.RoutingAction.REQUIRE,
                target_field_ids=["A"],
            )
        ],
    )


@pytest.fixture
def request_design() -> ir.FormDesign:
    """A two-section hardware request form with several routing rules."""
    return make_design(
        sections=[
            ir.FormSection(
                id="general",
                title="General Information",
                field_ids=["intro", "category", "other", "quantity"],
            ),
            ir.FormSection(
                id="contact",
                title="Contact",
                field_ids=["email", "phone", "agree"],
            ),
        ],
        fields=[
            ir.DisplayField(id="intro", kind="paragraph", label="Tell us what you need", section_id="general"),
            ir.ChoiceField(
                id="category",
                kind="radio-group",
                label="Category",
                options=["Hardware", "Software", "Other"],
                required=True,
                section_id="general",
            ),
            ir.TextField(id="other", kind="multiline-text", label="Describe it", section_id="general"),
            ir.TextField(id="quantity", kind="number", label="Quantity", section_id="general"),
            ir.TextField(id="email", kind="email", label="Email Address", section_id="contact"),
            ir.TextField(id="phone", kind="phone", label="Phone Number", section_id="contact"),
            ir.CheckboxField(id="agree", kind="checkbox", label="I agree", section_id="contact"),
        ],
        routing=[
            # Hide "other" unless Other is picked
            ir.RoutingRule(
                id="hide_other",
                conditions=[
                    ir.RoutingCondition(
                        source_field_id="category",
                        operator=ir.ConditionOperator.NOT_EQUALS,
                        value="Other",
                    )
                ],
                action=ir.RoutingAction.HIDE,
                target_field_ids=["other"],
            ),
            ir.RoutingRule(
                id="require_other",
                conditions=[
                    ir.RoutingCondition(source_field_id="category", value="Other"),
                ],
                action=ir.RoutingAction.REQUIRE,
                target_field_ids=["other"],
            ),
            ir.RoutingRule(
                id="bulk_contact",
                conditions=[
                    ir.RoutingCondition(
                        source_field_id="quantity",
                        operator=ir.ConditionOperator.GREATER_THAN,
                        value="10",
                    ),
                    ir.RoutingCondition(source_field_id="category", value="Hardware"),
                ],
                logic_operator=ir.LogicOperator.AND,
                action=ir.RoutingAction.REQUIRE,
                target_field_ids=["email", "agree"],
            ),
        ],
    )
