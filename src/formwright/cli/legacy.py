"""
Legacy record conversion commands.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from formwright.cli.utils import DEFAULT_DESIGN_PATH, open_design
from formwright.core.errors import LegacyFormatError
from formwright.core.legacy import from_legacy, to_legacy
from formwright.core.persistence import save_design

legacy_app = typer.Typer(help="Convert to and from the legacy flattened record", no_args_is_help=True)


@legacy_app.command("export")
def legacy_export(
    output: Path = typer.Argument(..., help="Where to write the legacy record"),
    design_path: Path = typer.Option(DEFAULT_DESIGN_PATH, "--design", "-d", help="Design file"),
) -> None:
    """Write form_fields / form_sections / form_routing columns as JSON."""
    record = to_legacy(open_design(design_path))
    output.write_text(json.dumps(record.model_dump(), indent=2) + "\n", encoding="utf-8")
    typer.echo(f"✓ Exported {len(record.form_fields)} field(s) to {output}")


@legacy_app.command("import")
def legacy_import(
    source: Path = typer.Argument(..., help="Legacy record JSON"),
    design_path: Path = typer.Option(DEFAULT_DESIGN_PATH, "--design", "-d", help="Design file"),
) -> None:
    """Rebuild a design file from a legacy record."""
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
        design = from_legacy(data)
    except (OSError, json.JSONDecodeError, LegacyFormatError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    save_design(design_path, design)
    typer.echo(f"✓ Imported {len(design.fields)} field(s) into {design_path}")
