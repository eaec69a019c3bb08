"""Helpers shared by the validator modules.

Validators accumulate messages per field into a plain dict and never raise
for rule violations. They only raise `ValueError` when called without input.
"""

from typing import Any, Optional

from roster.models.results import ValidationResult

ErrorMap = dict[str, list[str]]


def require_input(value: Any, name: str) -> None:
    if value is None:
        raise ValueError(f"{name} is required for validation.")


def add_error(errors: ErrorMap, field_name: str, message: str) -> None:
    errors.setdefault(field_name, []).append(message)


def check_required_text(
    errors: ErrorMap,
    field_name: str,
    value: Optional[str],
    label: str,
    max_length: int,
) -> None:
    """Required, non-blank text whose trimmed length stays within max_length."""
    if value is None or not value.strip():
        add_error(errors, field_name, f"{label} is required.")
        return
    if len(value.strip()) > max_length:
        add_error(errors, field_name, f"{label} cannot exceed {max_length} characters.")


def check_positive_id(
    errors: ErrorMap, field_name: str, value: Optional[int], label: str
) -> None:
    if value is None or value <= 0:
        add_error(errors, field_name, f"{label} is required and must be a positive integer.")


def build_result(errors: ErrorMap) -> ValidationResult:
    return ValidationResult.from_errors(errors)
