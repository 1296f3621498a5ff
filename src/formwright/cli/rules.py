"""
Routing rule commands.

Commands for listing, adding and removing conditional logic rules.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from formwright.cli.utils import DEFAULT_DESIGN_PATH, commit, open_design
from formwright.core import rules
from formwright.core.ir import ConditionOperator, LogicOperator, RoutingAction, RoutingCondition

rules_app = typer.Typer(help="Manage routing rules (conditional logic)", no_args_is_help=True)

console = Console()


@rules_app.command("list")
def rules_list(
    design_path: Path = typer.Option(DEFAULT_DESIGN_PATH, "--design", "-d", help="Design file"),
) -> None:
    """List rules in evaluation order."""
    design = open_design(design_path)
    if not design.routing:
        typer.echo("No routing rules defined.")
        return
    table = Table(title="Routing rules")
    table.add_column("#", justify="right")
    table.add_column("Id", style="dim")
    table.add_column("Rule")
    for index, rule in enumerate(design.routing):
        table.add_row(str(index), rule.id, rules.describe_rule(design, rule))
    console.print(table)


@rules_app.command("add")
def rules_add(
    source: str = typer.Option(..., "--source", "-s", help="Field tested by the condition"),
    value: str = typer.Option("", "--value", help="Value compared against"),
    operator: ConditionOperator = typer.Option(
        ConditionOperator.EQUALS, "--operator", "-o", help="Comparison operator"
    ),
    action: RoutingAction = typer.Option(RoutingAction.SHOW, "--action", "-a", help="Action"),
    targets: list[str] = typer.Option(..., "--target", "-t", help="Target field (repeatable)"),
    logic: LogicOperator = typer.Option(LogicOperator.AND, "--logic", help="AND or OR"),
    design_path: Path = typer.Option(DEFAULT_DESIGN_PATH, "--design", "-d", help="Design file"),
) -> None:
    """Add a rule with a single condition."""
    design = open_design(design_path)
    condition = RoutingCondition(source_field_id=source, operator=operator, value=value)
    updated = rules.add_rule(
        design, targets, conditions=[condition], logic_operator=logic, action=action
    )
    commit(design_path, design, updated, "rule references an unknown or unusable field")
    rule = updated.routing[-1]
    typer.echo(f"✓ Added rule {rule.id}: {rules.describe_rule(updated, rule)}")


@rules_app.command("remove")
def rules_remove(
    rule_id: str = typer.Argument(..., help="Rule to delete"),
    design_path: Path = typer.Option(DEFAULT_DESIGN_PATH, "--design", "-d", help="Design file"),
) -> None:
    """Delete a rule."""
    design = open_design(design_path)
    updated = rules.remove_rule(design, rule_id)
    commit(design_path, design, updated, f"unknown rule '{rule_id}'")
    typer.echo(f"✓ Removed rule {rule_id}")
