"""
Persistence boundary for form designs.

The engine itself never does I/O. Hosts hand designs to a ``DesignStore``;
the JSON file store here backs the command line tools and tests.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from .errors import make_load_error
from .ir import FormDesign

logger = logging.getLogger(__name__)


class DesignStore(Protocol):
    """Anything that can load and save a design by key."""

    def load(self, key: str) -> FormDesign: ...

    def save(self, key: str, design: FormDesign) -> None: ...


def load_design(path: Path) -> FormDesign:
    """Read a design document from a JSON file.

    Raises:
        DesignLoadError: If the file is missing or does not hold a valid design.
    """
    if not path.is_file():
        raise make_load_error("design file not found", source=path)
    return FormDesign.from_json(path.read_text(encoding="utf-8"), source=path)


def save_design(path: Path, design: FormDesign) -> Path:
    """Write a design document as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(design.to_json() + "\n", encoding="utf-8")
    logger.debug("Saved design with %d field(s) to %s", len(design.fields), path)
    return path


class JsonFileDesignStore:
    """Stores each design as ``<root>/<key>.json``."""

    def __init__(self, root: Path):
        self.root = root

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def load(self, key: str) -> FormDesign:
        return load_design(self.path_for(key))

    def save(self, key: str, design: FormDesign) -> None:
        save_design(self.path_for(key), design)

    def keys(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))
