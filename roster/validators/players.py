"""Player validation rules."""

from datetime import date
from typing import Optional
from urllib.parse import urlsplit

from roster.models.fields import (
    MAX_AGE_IN_YEARS,
    MAX_NAME_LENGTH,
    MAX_PHOTO_URL_LENGTH,
    VALID_GENDER_OPTIONS,
    Gender,
)
from roster.models.players import PlayerCreate, PlayerUpdate
from roster.models.results import ValidationResult
from roster.utils.dates import add_years, utc_today
from roster.validators.common import (
    ErrorMap,
    add_error,
    build_result,
    check_required_text,
    require_input,
)


def validate_create_player(dto: PlayerCreate) -> ValidationResult:
    require_input(dto, "dto")
    errors: ErrorMap = {}
    if dto.user_id is None or not dto.user_id.strip():
        add_error(errors, "UserId", "User ID is required.")
    _check_common(errors, dto.name, dto.date_of_birth, dto.gender, dto.photo_url)
    return build_result(errors)


def validate_update_player(dto: PlayerUpdate) -> ValidationResult:
    require_input(dto, "dto")
    errors: ErrorMap = {}
    _check_common(errors, dto.name, dto.date_of_birth, dto.gender, dto.photo_url)
    return build_result(errors)


def _check_common(
    errors: ErrorMap,
    name: Optional[str],
    date_of_birth: Optional[date],
    gender: Optional[str],
    photo_url: Optional[str],
) -> None:
    check_required_text(errors, "Name", name, "Name", MAX_NAME_LENGTH)
    _check_date_of_birth(errors, date_of_birth)
    _check_gender(errors, gender)
    _check_photo_url(errors, photo_url)


def _check_date_of_birth(errors: ErrorMap, date_of_birth: Optional[date]) -> None:
    if date_of_birth is None:
        add_error(errors, "DateOfBirth", "Date of birth is required.")
        return

    today = utc_today()
    if date_of_birth >= today:
        add_error(errors, "DateOfBirth", "Date of birth must be in the past.")
        return

    if date_of_birth < add_years(today, -MAX_AGE_IN_YEARS):
        add_error(
            errors,
            "DateOfBirth",
            f"Date of birth cannot be more than {MAX_AGE_IN_YEARS} years ago.",
        )


def _check_gender(errors: ErrorMap, gender: Optional[str]) -> None:
    if gender is None or not gender.strip():
        return
    if Gender.parse(gender) is None:
        add_error(
            errors,
            "Gender",
            f"Gender must be one of: {', '.join(VALID_GENDER_OPTIONS)}.",
        )


def is_http_url(value: str) -> bool:
    """True for absolute http/https URLs with a host."""
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme.lower() in {"http", "https"} and bool(parts.netloc)


def _check_photo_url(errors: ErrorMap, photo_url: Optional[str]) -> None:
    if photo_url is None or not photo_url.strip():
        return

    trimmed = photo_url.strip()
    if len(trimmed) > MAX_PHOTO_URL_LENGTH:
        add_error(
            errors,
            "PhotoUrl",
            f"Photo URL cannot exceed {MAX_PHOTO_URL_LENGTH} characters.",
        )
        return

    if not is_http_url(trimmed):
        add_error(errors, "PhotoUrl", "Photo URL must be a valid HTTP or HTTPS URL.")
