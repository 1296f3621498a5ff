"""
Legacy flattened storage representation.

Older service catalog rows keep a form in three sibling columns:
``form_fields`` (an ordered list of field records, each carrying its
``sectionId``), ``form_sections`` and ``form_routing``. Conversion in both
directions is pure, and lossless as long as every field's ``sectionId``
matches exactly one section's membership.

Reading also accepts the older vocabulary found in those rows: a ``type``
key instead of ``kind``, the kind names ``textarea``/``select``/``radio``/
``section``, ``fieldId`` instead of ``sourceFieldId`` in conditions, and
rules expressed as an ``actions`` list of ``{targetId, type}``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .errors import DesignLoadError, ErrorContext, ErrorKind, LegacyFormatError
from .ir import FieldKind, FormDesign

logger = logging.getLogger(__name__)

LEGACY_KIND_NAMES: dict[str, FieldKind] = {
    "textarea": FieldKind.MULTILINE_TEXT,
    "select": FieldKind.SINGLE_SELECT,
    "radio": FieldKind.RADIO_GROUP,
    "section": FieldKind.SECTION_DIVIDER,
}


class LegacyFormRecord(BaseModel):
    """The three form columns of a legacy service catalog row."""

    form_fields: list[dict[str, Any]] = Field(default_factory=list)
    form_sections: list[dict[str, Any]] = Field(default_factory=list)
    form_routing: list[dict[str, Any]] = Field(default_factory=list)


def to_legacy(design: FormDesign) -> LegacyFormRecord:
    """Flatten a design; fields are listed in layout order."""
    document = design.to_document()
    ordered = [f.id for f in design.ordered_fields()]
    seen = set(ordered)
    ordered.extend(f for f in design.fields if f not in seen)
    return LegacyFormRecord(
        form_fields=[document["fields"][field_id] for field_id in ordered],
        form_sections=document["sections"],
        form_routing=document["routing"],
    )


def _normalize_field(raw: Mapping[str, Any], index: int) -> dict[str, Any]:
    data = dict(raw)
    if "kind" not in data and "type" in data:
        data["kind"] = data.pop("type")
    kind = data.get("kind")
    if isinstance(kind, str) and kind in LEGACY_KIND_NAMES:
        data["kind"] = LEGACY_KIND_NAMES[kind].value
    if "id" not in data:
        raise LegacyFormatError(
            "field record has no id", ErrorContext(location=f"form_fields.{index}")
        )
    return data


def _normalize_condition(raw: Mapping[str, Any]) -> dict[str, Any]:
    data = dict(raw)
    if "sourceFieldId" not in data and "fieldId" in data:
        data["sourceFieldId"] = data.pop("fieldId")
    return data


def _normalize_rules(raw: Mapping[str, Any], index: int) -> list[dict[str, Any]]:
    """One stored rule may expand to several when it uses an ``actions`` list."""
    rule_id = raw.get("id") or f"rule_{index + 1}"
    conditions = [_normalize_condition(c) for c in raw.get("conditions", [])]
    base = {
        "id": rule_id,
        "conditions": conditions,
        "logicOperator": raw.get("logicOperator", "AND"),
    }
    if "actions" not in raw:
        return [
            {
                **base,
                "action": raw.get("action", "show"),
                "targetFieldIds": list(raw.get("targetFieldIds", [])),
            }
        ]

    # Entries without a target act on nothing; a rule left with none is dropped
    grouped: dict[str, list[str]] = {}
    for action in raw["actions"]:
        target = action.get("targetId")
        if not target:
            logger.debug(
                "Rule '%s': %s: action without targetId skipped",
                rule_id,
                ErrorKind.DANGLING_REFERENCE,
            )
            continue
        grouped.setdefault(action.get("type", "show"), []).append(target)
    rules = []
    for position, (action_type, targets) in enumerate(grouped.items()):
        rules.append(
            {
                **base,
                "id": rule_id if position == 0 else f"{rule_id}_{action_type}",
                "action": action_type,
                "targetFieldIds": targets,
            }
        )
    return rules


def _check_membership(
    fields: list[dict[str, Any]], sections: list[dict[str, Any]]
) -> None:
    owner: dict[str, str] = {}
    for s_index, section in enumerate(sections):
        section_id = section.get("id")
        for field_id in section.get("fieldIds", []):
            if field_id in owner:
                raise LegacyFormatError(
                    f"field '{field_id}' is listed by sections '{owner[field_id]}' "
                    f"and '{section_id}'",
                    ErrorContext(location=f"form_sections.{s_index}.fieldIds"),
                )
            owner[field_id] = section_id

    field_ids = set()
    for f_index, field in enumerate(fields):
        field_id = field["id"]
        field_ids.add(field_id)
        claimed = field.get("sectionId")
        if owner.get(field_id) != claimed:
            raise LegacyFormatError(
                f"field '{field_id}' claims section '{claimed}' but is listed by "
                f"'{owner.get(field_id)}'",
                ErrorContext(location=f"form_fields.{f_index}.sectionId"),
            )

    missing = [field_id for field_id in owner if field_id not in field_ids]
    if missing:
        raise LegacyFormatError(f"sections list unknown field(s): {', '.join(missing)}")


def from_legacy(record: LegacyFormRecord | Mapping[str, Any]) -> FormDesign:
    """Rebuild a design from the flattened columns.

    Raises:
        LegacyFormatError: If field/section membership is inconsistent or the
            records do not describe a valid design.
    """
    if not isinstance(record, LegacyFormRecord):
        if not isinstance(record, Mapping):
            raise LegacyFormatError("legacy record must be an object with form_* columns")
        try:
            record = LegacyFormRecord(
                form_fields=record.get("form_fields") or [],
                form_sections=record.get("form_sections") or [],
                form_routing=record.get("form_routing") or [],
            )
        except ValidationError as e:
            raise LegacyFormatError(f"malformed legacy columns: {e.errors()[0]['msg']}") from e

    fields = [_normalize_field(f, i) for i, f in enumerate(record.form_fields)]
    _check_membership(fields, record.form_sections)

    routing: list[dict[str, Any]] = []
    for index, rule in enumerate(record.form_routing):
        routing.extend(_normalize_rules(rule, index))

    document = {
        "sections": record.form_sections,
        "fields": {f["id"]: f for f in fields},
        "routing": routing,
    }
    try:
        design = FormDesign.from_document(document)
    except DesignLoadError as e:
        raise LegacyFormatError(e.message, e.context) from e
    logger.debug(
        "Converted legacy record: %d section(s), %d field(s), %d rule(s)",
        len(design.sections),
        len(design.fields),
        len(design.routing),
    )
    return design
