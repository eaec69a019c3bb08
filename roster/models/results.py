"""Outcome types returned by validators and domain services.

Validators return a `ValidationResult`. Services return a `ServiceResult`,
which carries either data (success) or one of two failure channels:
`validation_errors` for rule violations keyed by field, and `error_messages`
for everything else (not found, id mismatch, conflicts, storage faults).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Why a service call failed, for callers that map results to responses."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    MISMATCH = "mismatch"
    CONFLICT = "conflict"
    NOT_APPLIED = "not_applied"
    FAILURE = "failure"


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def valid(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, errors: Mapping[str, Sequence[str]]) -> ValidationResult:
        cleaned = {key: list(messages) for key, messages in errors.items() if messages}
        if not cleaned:
            raise ValueError("An invalid result needs at least one error message.")
        return cls(is_valid=False, errors=cleaned)

    @classmethod
    def from_errors(cls, errors: Mapping[str, Sequence[str]]) -> ValidationResult:
        """Build a valid result for an empty mapping, invalid otherwise."""
        if not any(errors.values()):
            return cls.valid()
        return cls.invalid(errors)


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    success: bool
    data: T | None = None
    error_messages: list[str] = field(default_factory=list)
    validation_errors: dict[str, list[str]] = field(default_factory=dict)
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> ServiceResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls,
        messages: str | Iterable[str],
        kind: ErrorKind = ErrorKind.FAILURE,
    ) -> ServiceResult[T]:
        if isinstance(messages, str):
            messages = [messages]
        cleaned = [m for m in messages if m and m.strip()]
        if not cleaned:
            raise ValueError("Error message cannot be empty.")
        if kind is ErrorKind.VALIDATION:
            raise ValueError("Use validation_failed() for validation errors.")
        return cls(success=False, error_messages=cleaned, error_kind=kind)

    @classmethod
    def not_found(cls, message: str) -> ServiceResult[T]:
        return cls.fail(message, kind=ErrorKind.NOT_FOUND)

    @classmethod
    def validation_failed(
        cls, errors: ValidationResult | Mapping[str, Sequence[str]]
    ) -> ServiceResult[T]:
        if isinstance(errors, ValidationResult):
            errors = errors.errors
        cleaned = {key: list(messages) for key, messages in errors.items() if messages}
        if not cleaned:
            raise ValueError("Validation failure needs at least one error message.")
        return cls(success=False, validation_errors=cleaned, error_kind=ErrorKind.VALIDATION)

    @classmethod
    def field_error(cls, field_name: str, message: str) -> ServiceResult[T]:
        if not field_name or not field_name.strip():
            raise ValueError("Field name cannot be empty.")
        return cls.validation_failed({field_name: [message]})
