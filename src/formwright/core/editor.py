"""
Structural editor for form designs.

The only sanctioned way to mutate a ``FormDesign``. Every operation is pure:
it takes a design plus arguments and returns a new design, leaving the input
untouched. Operations that name an unknown section or field, or an index out
of range, return the input design unchanged and log an ``invalid_target``
message at DEBUG level. They never raise.

After every operation:
    - each field is listed by exactly one section, the one its
      ``section_id`` names
    - every routing condition and target names an existing field
    - no routing rule is left without conditions or without targets
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Collection, Mapping
from typing import Any

from pydantic import ValidationError

from .config import EditorSettings
from .errors import ErrorKind
from .ir import (
    CheckboxField,
    ChoiceField,
    DisplayField,
    FieldKind,
    FormDesign,
    FormField,
    FormSection,
    TextField,
    parse_field,
)

logger = logging.getLogger(__name__)

DEFAULT_LABELS: dict[FieldKind, str] = {
    FieldKind.HEADING: "Section Heading",
    FieldKind.PARAGRAPH: "Informational Text",
    FieldKind.EMAIL: "Email Address",
    FieldKind.PHONE: "Phone Number",
}
FALLBACK_LABEL = "New Field"

# Keys update_field never applies: identity and placement belong to other operations.
_STRUCTURAL_KEYS = frozenset({"id", "section_id"})
_SECTION_UPDATABLE = frozenset({"title", "description", "collapsed"})


def _build_key_names(*models: type) -> dict[str, str]:
    """Map both snake_case names and camelCase aliases to attribute names."""
    names: dict[str, str] = {}
    for model in models:
        for name, info in model.model_fields.items():
            names[name] = name
            if info.alias:
                names[info.alias] = name
    return names


_FIELD_KEYS = _build_key_names(TextField, ChoiceField, CheckboxField, DisplayField)
_SECTION_KEYS = _build_key_names(FormSection)


def new_id(prefix: str, taken: Collection[str] = ()) -> str:
    """Generate an id that is not in ``taken``.

    Ids are random so a deleted id is never handed out again.
    """
    while True:
        candidate = f"{prefix}_{uuid.uuid4().hex[:12]}"
        if candidate not in taken:
            return candidate


def default_label(kind: FieldKind) -> str:
    return DEFAULT_LABELS.get(kind, FALLBACK_LABEL)


def _invalid_target(operation: str, detail: str, design: FormDesign) -> FormDesign:
    logger.debug("%s: %s: %s", operation, ErrorKind.INVALID_TARGET, detail)
    return design


def _replace_section(design: FormDesign, section: FormSection) -> list[FormSection]:
    return [section if s.id == section.id else s for s in design.sections]


def _clamp(index: int, upper: int) -> int:
    return max(0, min(index, upper))


# =============================================================================
# Fields
# =============================================================================


def add_field(
    design: FormDesign,
    section_id: str,
    kind: FieldKind | str,
    *,
    field_id: str | None = None,
    settings: EditorSettings | None = None,
) -> FormDesign:
    """Append a new field of ``kind`` to the end of a section.

    The field gets a kind-appropriate default label; choice kinds are seeded
    with placeholder options. ``field_id`` may be supplied by the caller and
    must not already be in use.
    """
    settings = settings or EditorSettings()
    section = design.get_section(section_id)
    if section is None:
        return _invalid_target("add_field", f"unknown section '{section_id}'", design)
    try:
        field_kind = FieldKind(kind)
    except ValueError:
        return _invalid_target("add_field", f"unknown field kind '{kind}'", design)
    if field_id is not None and field_id in design.fields:
        return _invalid_target("add_field", f"field id '{field_id}' already in use", design)

    field_id = field_id or new_id("field", design.fields)
    data: dict[str, Any] = {
        "id": field_id,
        "kind": field_kind.value,
        "label": default_label(field_kind),
        "help_text": "",
        "required": False,
        "width": "full",
        "section_id": section_id,
    }
    if field_kind.is_choice:
        data["options"] = list(settings.choice_options)
    if not (field_kind.is_display or field_kind == FieldKind.CHECKBOX):
        data["placeholder"] = ""
    field = parse_field(data)

    updated = section.model_copy(update={"field_ids": [*section.field_ids, field_id]})
    logger.debug("add_field: %s '%s' added to section '%s'", field_kind, field_id, section_id)
    return design.model_copy(
        update={
            "fields": {**design.fields, field_id: field},
            "sections": _replace_section(design, updated),
        }
    )


def duplicate_field(
    design: FormDesign,
    field_id: str,
    *,
    new_field_id: str | None = None,
    settings: EditorSettings | None = None,
) -> FormDesign:
    """Clone a field and insert the copy directly after the original."""
    settings = settings or EditorSettings()
    original = design.get_field(field_id)
    if original is None:
        return _invalid_target("duplicate_field", f"unknown field '{field_id}'", design)
    section = design.get_section(original.section_id)
    if section is None or field_id not in section.field_ids:
        return _invalid_target("duplicate_field", f"field '{field_id}' has no owner", design)
    if new_field_id is not None and new_field_id in design.fields:
        return _invalid_target(
            "duplicate_field", f"field id '{new_field_id}' already in use", design
        )

    copy_id = new_field_id or new_id("field", design.fields)
    update: dict[str, Any] = {"id": copy_id, "label": f"{original.label}{settings.copy_suffix}"}
    if isinstance(original, ChoiceField):
        update["options"] = list(original.options)
    copy = original.model_copy(update=update)

    field_ids = list(section.field_ids)
    field_ids.insert(field_ids.index(field_id) + 1, copy_id)
    updated = section.model_copy(update={"field_ids": field_ids})
    return design.model_copy(
        update={
            "fields": {**design.fields, copy_id: copy},
            "sections": _replace_section(design, updated),
        }
    )


def _remove_fields(design: FormDesign, field_ids: Collection[str]) -> FormDesign:
    """Remove fields from sections, the arena and every routing rule."""
    removed = set(field_ids)
    sections = [
        s.model_copy(update={"field_ids": [f for f in s.field_ids if f not in removed]})
        if any(f in removed for f in s.field_ids)
        else s
        for s in design.sections
    ]
    fields = {k: v for k, v in design.fields.items() if k not in removed}

    routing = []
    for rule in design.routing:
        pruned = rule.without_fields(removed)
        if pruned is None:
            logger.debug("Dropping routing rule '%s': no conditions or targets left", rule.id)
            continue
        routing.append(pruned)

    return design.model_copy(update={"sections": sections, "fields": fields, "routing": routing})


def remove_field(design: FormDesign, field_id: str) -> FormDesign:
    """Delete a field and prune every routing reference to it.

    Rules left without conditions or targets are dropped.
    """
    if field_id not in design.fields:
        return _invalid_target("remove_field", f"unknown field '{field_id}'", design)
    return _remove_fields(design, {field_id})


def update_field(
    design: FormDesign,
    field_id: str,
    updates: Mapping[str, Any],
    *,
    settings: EditorSettings | None = None,
) -> FormDesign:
    """Shallow-merge ``updates`` into a field.

    Keys may be snake_case or camelCase. ``id`` and ``section_id`` are never
    changed here; use ``move_field`` to relocate a field. Changing ``kind``
    re-validates the field as the new variant, seeding options when it
    becomes a choice field. An update that does not validate is ignored.
    """
    settings = settings or EditorSettings()
    field = design.get_field(field_id)
    if field is None:
        return _invalid_target("update_field", f"unknown field '{field_id}'", design)

    merged = field.model_dump()
    for key, value in updates.items():
        name = _FIELD_KEYS.get(key)
        if name is None or name in _STRUCTURAL_KEYS:
            logger.debug("update_field: ignoring key '%s'", key)
            continue
        merged[name] = value

    try:
        new_kind = FieldKind(merged["kind"])
    except ValueError:
        return _invalid_target("update_field", f"unknown field kind '{merged['kind']}'", design)
    if new_kind.is_choice and not field.field_kind.is_choice and not merged.get("options"):
        merged["options"] = list(settings.choice_options)

    try:
        updated = parse_field(merged)
    except ValidationError as e:
        return _invalid_target("update_field", f"rejected update for '{field_id}': {e}", design)
    if updated == field:
        return design
    return design.model_copy(update={"fields": {**design.fields, field_id: updated}})


def move_field(
    design: FormDesign,
    field_id: str,
    from_index: int,
    to_index: int,
    target_section_id: str | None = None,
) -> FormDesign:
    """Reposition a field within its section or relocate it to another one.

    ``from_index`` must be the field's current position in its section.
    ``to_index`` is clamped to the destination's bounds.
    """
    field = design.get_field(field_id)
    if field is None:
        return _invalid_target("move_field", f"unknown field '{field_id}'", design)
    source = design.get_section(field.section_id)
    if source is None:
        return _invalid_target("move_field", f"field '{field_id}' has no owner", design)
    if not 0 <= from_index < len(source.field_ids) or source.field_ids[from_index] != field_id:
        return _invalid_target(
            "move_field", f"field '{field_id}' is not at index {from_index}", design
        )

    target_id = target_section_id or source.id
    if target_id == source.id:
        field_ids = list(source.field_ids)
        field_ids.pop(from_index)
        destination = _clamp(to_index, len(field_ids))
        if destination == from_index:
            return design
        field_ids.insert(destination, field_id)
        updated = source.model_copy(update={"field_ids": field_ids})
        return design.model_copy(update={"sections": _replace_section(design, updated)})

    target = design.get_section(target_id)
    if target is None:
        return _invalid_target("move_field", f"unknown section '{target_id}'", design)

    source_ids = list(source.field_ids)
    source_ids.pop(from_index)
    target_ids = list(target.field_ids)
    target_ids.insert(_clamp(to_index, len(target_ids)), field_id)

    sections = []
    for section in design.sections:
        if section.id == source.id:
            section = section.model_copy(update={"field_ids": source_ids})
        elif section.id == target.id:
            section = section.model_copy(update={"field_ids": target_ids})
        sections.append(section)
    moved = field.model_copy(update={"section_id": target.id})
    return design.model_copy(
        update={"sections": sections, "fields": {**design.fields, field_id: moved}}
    )


# =============================================================================
# Sections
# =============================================================================


def add_section(
    design: FormDesign,
    *,
    section_id: str | None = None,
    title: str | None = None,
    settings: EditorSettings | None = None,
) -> FormDesign:
    """Append a new empty section."""
    settings = settings or EditorSettings()
    taken = {s.id for s in design.sections}
    if section_id is not None and section_id in taken:
        return _invalid_target("add_section", f"section id '{section_id}' already in use", design)
    section = FormSection(
        id=section_id or new_id("section", taken),
        title=title if title is not None else settings.default_section_title,
        description="",
    )
    return design.model_copy(update={"sections": [*design.sections, section]})


def update_section(design: FormDesign, section_id: str, updates: Mapping[str, Any]) -> FormDesign:
    """Update a section's title, description or collapsed state."""
    section = design.get_section(section_id)
    if section is None:
        return _invalid_target("update_section", f"unknown section '{section_id}'", design)

    merged = section.model_dump()
    for key, value in updates.items():
        name = _SECTION_KEYS.get(key)
        if name not in _SECTION_UPDATABLE:
            logger.debug("update_section: ignoring key '%s'", key)
            continue
        merged[name] = value
    try:
        updated = FormSection.model_validate(merged)
    except ValidationError as e:
        return _invalid_target("update_section", f"rejected update for '{section_id}': {e}", design)
    if updated == section:
        return design
    return design.model_copy(update={"sections": _replace_section(design, updated)})


def remove_section(design: FormDesign, section_id: str) -> FormDesign:
    """Delete a section, every field it owns, and their routing references."""
    section = design.get_section(section_id)
    if section is None:
        return _invalid_target("remove_section", f"unknown section '{section_id}'", design)

    owned = set(section.field_ids)
    owned.update(f.id for f in design.fields.values() if f.section_id == section_id)
    remaining = design.model_copy(
        update={"sections": [s for s in design.sections if s.id != section_id]}
    )
    logger.debug("remove_section: '%s' with %d field(s)", section_id, len(owned))
    return _remove_fields(remaining, owned)


def move_section(design: FormDesign, from_index: int, to_index: int) -> FormDesign:
    """Reorder sections. ``to_index`` is clamped to the list bounds."""
    count = len(design.sections)
    if not 0 <= from_index < count:
        return _invalid_target("move_section", f"no section at index {from_index}", design)
    destination = _clamp(to_index, count - 1)
    if destination == from_index:
        return design
    sections = list(design.sections)
    section = sections.pop(from_index)
    sections.insert(destination, section)
    return design.model_copy(update={"sections": sections})
