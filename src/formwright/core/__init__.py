"""
Formwright core: form design model, structural editor, routing evaluator
and runtime.
"""

from . import ir
from .editor import (
    add_field,
    add_section,
    duplicate_field,
    move_field,
    move_section,
    remove_field,
    remove_section,
    update_field,
    update_section,
)
from .evaluator import DerivedState, FieldState, evaluate
from .invariants import Diagnostic, check_design, is_consistent
from .legacy import LegacyFormRecord, from_legacy, to_legacy
from .rules import add_rule, describe_rule, remove_rule, update_rule
from .runtime import FormSession, SubmissionResult, render, validate_submission

__all__ = [
    "ir",
    # Structural editor
    "add_field",
    "add_section",
    "duplicate_field",
    "move_field",
    "move_section",
    "remove_field",
    "remove_section",
    "update_field",
    "update_section",
    # Rules
    "add_rule",
    "describe_rule",
    "remove_rule",
    "update_rule",
    # Evaluation and runtime
    "DerivedState",
    "FieldState",
    "evaluate",
    "FormSession",
    "SubmissionResult",
    "render",
    "validate_submission",
    # Checks and conversion
    "Diagnostic",
    "check_design",
    "is_consistent",
    "LegacyFormRecord",
    "from_legacy",
    "to_legacy",
]
