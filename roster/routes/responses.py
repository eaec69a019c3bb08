"""Translate service results into HTTP responses."""

from typing import Any, TypeVar

from fastapi import HTTPException

from roster.models.results import ErrorKind, ServiceResult

T = TypeVar("T")

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.MISMATCH: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_APPLIED: 409,
    ErrorKind.FAILURE: 500,
}


def unwrap(result: ServiceResult[T]) -> T:
    """Return result.data, or raise an HTTPException carrying both error channels."""
    if result.success:
        return result.data  # type: ignore[return-value]
    status_code = STATUS_BY_KIND[result.error_kind or ErrorKind.FAILURE]
    detail: dict[str, Any] = {
        "error_messages": result.error_messages,
        "validation_errors": result.validation_errors,
    }
    raise HTTPException(status_code=status_code, detail=detail)
