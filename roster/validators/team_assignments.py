"""Team assignment validation rules.

Rules:
    TeamName / ChampionshipName: required, trimmed length <= 200.
    JoinedDate: required, within [100 years ago, 1 year from today].
    LeftDate: optional; when present, strictly after JoinedDate and not in
        the future. Both ordering messages can be reported together.
"""

from datetime import date
from typing import Optional

from roster.models.fields import (
    MAX_CHAMPIONSHIP_NAME_LENGTH,
    MAX_JOINED_DATE_FUTURE_YEARS,
    MAX_JOINED_DATE_PAST_YEARS,
    MAX_TEAM_NAME_LENGTH,
)
from roster.models.results import ValidationResult
from roster.models.team_assignments import (
    TeamAssignment,
    TeamAssignmentCreate,
    TeamAssignmentUpdate,
)
from roster.utils.dates import add_years, utc_today
from roster.validators.common import (
    ErrorMap,
    add_error,
    build_result,
    check_positive_id,
    check_required_text,
    require_input,
)


def validate_create_team_assignment(dto: TeamAssignmentCreate) -> ValidationResult:
    require_input(dto, "dto")
    errors: ErrorMap = {}
    check_positive_id(errors, "PlayerId", dto.player_id, "Player ID")
    _check_names(errors, dto.team_name, dto.championship_name)
    _check_joined_date(errors, dto.joined_date)
    return build_result(errors)


def validate_update_team_assignment(dto: TeamAssignmentUpdate) -> ValidationResult:
    """Field checks plus LeftDate ordering against the dto's own JoinedDate."""
    require_input(dto, "dto")
    errors: ErrorMap = {}
    _check_names(errors, dto.team_name, dto.championship_name)
    _check_joined_date(errors, dto.joined_date)
    _check_left_date(errors, dto.left_date, dto.joined_date)
    return build_result(errors)


def validate_team_assignment(assignment: TeamAssignment) -> ValidationResult:
    require_input(assignment, "assignment")
    errors: ErrorMap = {}
    check_positive_id(errors, "PlayerId", assignment.player_id, "Player ID")
    _check_names(errors, assignment.team_name, assignment.championship_name)
    _check_joined_date(errors, assignment.joined_date)
    _check_left_date(errors, assignment.left_date, assignment.joined_date)
    return build_result(errors)


def validate_left_date(left_date: Optional[date], joined_date: date) -> ValidationResult:
    """Check a left date on its own, as used when removing a player from a team."""
    errors: ErrorMap = {}
    if left_date is None:
        add_error(errors, "LeftDate", "Left date is required.")
    else:
        _check_left_date(errors, left_date, joined_date)
    return build_result(errors)


def _check_names(
    errors: ErrorMap, team_name: Optional[str], championship_name: Optional[str]
) -> None:
    check_required_text(errors, "TeamName", team_name, "Team name", MAX_TEAM_NAME_LENGTH)
    check_required_text(
        errors,
        "ChampionshipName",
        championship_name,
        "Championship name",
        MAX_CHAMPIONSHIP_NAME_LENGTH,
    )


def _check_joined_date(errors: ErrorMap, joined_date: Optional[date]) -> None:
    if joined_date is None:
        add_error(errors, "JoinedDate", "Joined date is required.")
        return

    today = utc_today()
    if joined_date > add_years(today, MAX_JOINED_DATE_FUTURE_YEARS):
        add_error(
            errors,
            "JoinedDate",
            f"Joined date cannot be more than {MAX_JOINED_DATE_FUTURE_YEARS} year in the future.",
        )
    if joined_date < add_years(today, -MAX_JOINED_DATE_PAST_YEARS):
        add_error(
            errors,
            "JoinedDate",
            f"Joined date cannot be more than {MAX_JOINED_DATE_PAST_YEARS} years in the past.",
        )


def _check_left_date(
    errors: ErrorMap, left_date: Optional[date], joined_date: Optional[date]
) -> None:
    if left_date is None:
        return
    if joined_date is not None and left_date <= joined_date:
        add_error(errors, "LeftDate", "Left date must be after the joined date.")
    if left_date > utc_today():
        add_error(errors, "LeftDate", "Left date cannot be in the future.")
