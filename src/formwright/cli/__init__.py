"""
Formwright CLI.

- design.py: design file creation, inspection and structural edits
- rules.py: routing rule management
- runtime.py: evaluation and submission validation
- legacy.py: legacy flattened record conversion
- utils.py: shared helpers
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from formwright.cli.design import (
    add_field_command,
    add_section_command,
    check_command,
    duplicate_field_command,
    move_field_command,
    move_section_command,
    new_command,
    remove_field_command,
    remove_section_command,
    show_command,
)
from formwright.cli.legacy import legacy_app
from formwright.cli.rules import rules_app
from formwright.cli.runtime import evaluate_command, submit_command
from formwright.cli.utils import get_version, version_callback
from formwright.core.config import load_settings
from formwright.core.errors import ConfigError

app = typer.Typer(
    help="""Formwright – dynamic form designer

Design commands operate on a JSON design file (default: form.json):
  • new, show, check
  • add-section, add-field, duplicate-field, move-field, move-section,
    remove-field, remove-section
  • rules list|add|remove

Runtime commands replay routing rules against captured values:
  • evaluate, submit
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Settings file (default: ./formwright.toml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Load settings and configure logging for every command."""
    try:
        settings = load_settings(config)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.logging.level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


app.command(name="new")(new_command)
app.command(name="show")(show_command)
app.command(name="check")(check_command)
app.command(name="add-section")(add_section_command)
app.command(name="add-field")(add_field_command)
app.command(name="duplicate-field")(duplicate_field_command)
app.command(name="move-field")(move_field_command)
app.command(name="move-section")(move_section_command)
app.command(name="remove-field")(remove_field_command)
app.command(name="remove-section")(remove_section_command)
app.command(name="evaluate")(evaluate_command)
app.command(name="submit")(submit_command)
app.add_typer(rules_app, name="rules")
app.add_typer(legacy_app, name="legacy")


def main() -> None:
    app()


__all__ = ["app", "main", "get_version", "version_callback"]
