"""Shared CLI helpers."""

from __future__ import annotations

import json
import platform
from pathlib import Path
from typing import Any

import typer

from formwright.core.config import Settings
from formwright.core.errors import DesignLoadError
from formwright.core.ir import FormDesign
from formwright.core.persistence import load_design, save_design

DEFAULT_DESIGN_PATH = Path("form.json")


def get_version() -> str:
    from formwright._version import get_version as _get_version

    return _get_version()


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"Formwright {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def get_settings(ctx: typer.Context) -> Settings:
    obj = ctx.find_root().obj
    return obj if isinstance(obj, Settings) else Settings()


def open_design(path: Path) -> FormDesign:
    """Load a design or exit with code 1."""
    try:
        return load_design(path)
    except DesignLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def commit(path: Path, before: FormDesign, after: FormDesign, what: str) -> None:
    """Save ``after`` unless the edit was a no-op, which exits with code 1."""
    if after is before:
        typer.echo(f"Nothing changed: {what}", err=True)
        raise typer.Exit(code=1)
    save_design(path, after)


def read_values(path: Path | None) -> dict[str, Any]:
    """Read a JSON object of field id -> value, or exit with code 1."""
    if path is None:
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Error: cannot read values from {path}: {e}", err=True)
        raise typer.Exit(code=1)
    if not isinstance(data, dict):
        typer.echo(f"Error: {path} must hold a JSON object", err=True)
        raise typer.Exit(code=1)
    return data
