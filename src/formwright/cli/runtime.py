"""
Runtime commands: evaluate routing and validate a submission.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from formwright.cli.utils import DEFAULT_DESIGN_PATH, get_settings, open_design, read_values
from formwright.core.evaluator import evaluate
from formwright.core.runtime import validate_submission

console = Console()


def evaluate_command(
    values_path: Path | None = typer.Option(
        None, "--values", "-V", help="JSON object of field id -> value (default: empty)"
    ),
    design_path: Path = typer.Option(DEFAULT_DESIGN_PATH, "--design", "-d", help="Design file"),
) -> None:
    """Show which fields are visible and required for the given values."""
    design = open_design(design_path)
    values = read_values(values_path)
    state = evaluate(design, values)

    table = Table(title="Derived field state")
    table.add_column("Field", style="dim")
    table.add_column("Label")
    table.add_column("Visible")
    table.add_column("Required")
    for field in design.ordered_fields():
        table.add_row(
            field.id,
            field.label,
            "yes" if state.is_visible(field.id) else "[red]no[/red]",
            "[bold]yes[/bold]" if state.is_required(field.id) else "no",
        )
    console.print(table)


def submit_command(
    ctx: typer.Context,
    values_path: Path = typer.Option(..., "--values", "-V", help="JSON object of values"),
    design_path: Path = typer.Option(DEFAULT_DESIGN_PATH, "--design", "-d", help="Design file"),
) -> None:
    """Validate a submission and print the payload."""
    design = open_design(design_path)
    result = validate_submission(
        design, read_values(values_path), settings=get_settings(ctx).runtime
    )
    if not result.ok:
        for failure in result.failures:
            typer.echo(f"{failure.label} ({failure.field_id}): {failure.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(result.payload, indent=2))
