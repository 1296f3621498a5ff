"""
Design authoring commands.

Each command loads the design file, applies one structural edit and writes
the result back. An edit naming an unknown section or field changes nothing
and exits with code 1.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.tree import Tree

from formwright.cli.utils import DEFAULT_DESIGN_PATH, commit, get_settings, open_design
from formwright.core import editor
from formwright.core.invariants import Severity, check_design
from formwright.core.ir import FieldKind, FormDesign, default_design
from formwright.core.persistence import save_design
from formwright.core.rules import describe_rule

console = Console()

DesignOption = typer.Option(DEFAULT_DESIGN_PATH, "--design", "-d", help="Design JSON file")


def new_command(
    path: Path = typer.Argument(DEFAULT_DESIGN_PATH, help="Where to write the design"),
    blank: bool = typer.Option(False, "--blank", help="Start without the default section"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """Create a new design file."""
    if path.exists() and not force:
        typer.echo(f"Design already exists: {path}", err=True)
        typer.echo("Use --force to overwrite.", err=True)
        raise typer.Exit(code=1)
    design = FormDesign() if blank else default_design()
    save_design(path, design)
    typer.echo(f"✓ Created design: {path}")


def show_command(design_path: Path = DesignOption) -> None:
    """Print sections, fields and routing rules."""
    design = open_design(design_path)
    tree = Tree(f"[bold]{design_path}[/bold]")
    for section in design.sections:
        branch = tree.add(f"[bold]{section.title}[/bold] [dim]({section.id})[/dim]")
        for field_id in section.field_ids:
            field = design.get_field(field_id)
            if field is None:
                branch.add(f"[red]missing field {field_id}[/red]")
                continue
            marker = " [red]*[/red]" if field.required else ""
            branch.add(f"{field.label}{marker} [dim]{field.kind} ({field.id})[/dim]")
    if design.routing:
        rules = tree.add("[bold]Routing[/bold]")
        for rule in design.routing:
            rules.add(f"{describe_rule(design, rule)} [dim]({rule.id})[/dim]")
    console.print(tree)


def check_command(design_path: Path = DesignOption) -> None:
    """Check the design's structural invariants."""
    design = open_design(design_path)
    diagnostics = check_design(design)
    errors = [d for d in diagnostics if d.severity == Severity.ERROR]
    for diagnostic in diagnostics:
        colour = "red" if diagnostic.severity == Severity.ERROR else "yellow"
        console.print(f"[{colour}]{diagnostic}[/{colour}]")
    if errors:
        raise typer.Exit(code=1)
    console.print("[green]Design is consistent[/green]")


def add_section_command(
    ctx: typer.Context,
    title: str | None = typer.Option(None, "--title", "-t", help="Section title"),
    design_path: Path = DesignOption,
) -> None:
    """Append an empty section."""
    design = open_design(design_path)
    updated = editor.add_section(design, title=title, settings=get_settings(ctx).editor)
    commit(design_path, design, updated, "section not added")
    typer.echo(f"✓ Added section {updated.sections[-1].id}")


def add_field_command(
    ctx: typer.Context,
    section_id: str = typer.Argument(..., help="Section to append to"),
    kind: FieldKind = typer.Argument(..., help="Field kind"),
    label: str | None = typer.Option(None, "--label", "-l", help="Field label"),
    required: bool = typer.Option(False, "--required", help="Mark the field required"),
    design_path: Path = DesignOption,
) -> None:
    """Append a field to a section."""
    settings = get_settings(ctx).editor
    design = open_design(design_path)
    updated = editor.add_field(design, section_id, kind, settings=settings)
    commit(design_path, design, updated, f"unknown section '{section_id}'")
    (field_id,) = set(updated.fields) - set(design.fields)
    changes: dict[str, object] = {}
    if label is not None:
        changes["label"] = label
    if required:
        changes["required"] = True
    if changes:
        save_design(design_path, editor.update_field(updated, field_id, changes, settings=settings))
    typer.echo(f"✓ Added {kind.value} field {field_id}")


def duplicate_field_command(
    ctx: typer.Context,
    field_id: str = typer.Argument(..., help="Field to copy"),
    design_path: Path = DesignOption,
) -> None:
    """Copy a field directly below the original."""
    design = open_design(design_path)
    updated = editor.duplicate_field(design, field_id, settings=get_settings(ctx).editor)
    commit(design_path, design, updated, f"unknown field '{field_id}'")
    (copy_id,) = set(updated.fields) - set(design.fields)
    typer.echo(f"✓ Duplicated {field_id} as {copy_id}")


def remove_field_command(
    field_id: str = typer.Argument(..., help="Field to delete"),
    design_path: Path = DesignOption,
) -> None:
    """Delete a field and every routing reference to it."""
    design = open_design(design_path)
    updated = editor.remove_field(design, field_id)
    commit(design_path, design, updated, f"unknown field '{field_id}'")
    dropped = len(design.routing) - len(updated.routing)
    typer.echo(f"✓ Removed field {field_id} ({dropped} rule(s) dropped)")


def remove_section_command(
    section_id: str = typer.Argument(..., help="Section to delete"),
    design_path: Path = DesignOption,
) -> None:
    """Delete a section with all of its fields."""
    design = open_design(design_path)
    updated = editor.remove_section(design, section_id)
    commit(design_path, design, updated, f"unknown section '{section_id}'")
    removed = len(design.fields) - len(updated.fields)
    typer.echo(f"✓ Removed section {section_id} and {removed} field(s)")


def move_field_command(
    field_id: str = typer.Argument(..., help="Field to move"),
    to_index: int = typer.Argument(..., help="Destination position"),
    section_id: str | None = typer.Option(
        None, "--section", "-s", help="Destination section (default: current)"
    ),
    design_path: Path = DesignOption,
) -> None:
    """Move a field within its section or into another section."""
    design = open_design(design_path)
    field = design.get_field(field_id)
    owner = design.get_section(field.section_id) if field else None
    from_index = owner.field_ids.index(field_id) if owner and field_id in owner.field_ids else -1
    if owner and from_index >= 0 and section_id in (None, owner.id):
        if max(0, min(to_index, len(owner.field_ids) - 1)) == from_index:
            typer.echo(f"{field_id} is already at position {from_index}")
            return
    updated = editor.move_field(design, field_id, from_index, to_index, section_id)
    commit(design_path, design, updated, f"cannot move '{field_id}' there")
    typer.echo(f"✓ Moved {field_id}")


def move_section_command(
    section_id: str = typer.Argument(..., help="Section to move"),
    to_index: int = typer.Argument(..., help="Destination position"),
    design_path: Path = DesignOption,
) -> None:
    """Reorder sections."""
    design = open_design(design_path)
    from_index = design.section_index(section_id)
    if from_index is not None and max(0, min(to_index, len(design.sections) - 1)) == from_index:
        typer.echo(f"{section_id} is already at position {from_index}")
        return
    updated = editor.move_section(design, -1 if from_index is None else from_index, to_index)
    commit(design_path, design, updated, f"cannot move '{section_id}' there")
    typer.echo(f"✓ Moved {section_id}")
