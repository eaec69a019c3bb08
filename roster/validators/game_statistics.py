"""Game statistic validation rules."""

from datetime import date
from typing import Optional

from roster.models.fields import (
    MAX_JERSEY_NUMBER,
    MAX_MINUTES_PLAYED,
    MIN_JERSEY_NUMBER,
    MIN_MINUTES_PLAYED,
)
from roster.models.game_statistics import (
    GameStatistic,
    GameStatisticCreate,
    GameStatisticUpdate,
)
from roster.models.results import ValidationResult
from roster.utils.dates import utc_today
from roster.validators.common import (
    ErrorMap,
    add_error,
    build_result,
    check_positive_id,
    require_input,
)


def validate_create_game_statistic(dto: GameStatisticCreate) -> ValidationResult:
    require_input(dto, "dto")
    return _validate_fields(
        dto.team_assignment_id,
        dto.game_date,
        dto.minutes_played,
        dto.jersey_number,
        dto.goals,
        dto.assists,
    )


def validate_update_game_statistic(dto: GameStatisticUpdate) -> ValidationResult:
    require_input(dto, "dto")
    return _validate_fields(
        dto.team_assignment_id,
        dto.game_date,
        dto.minutes_played,
        dto.jersey_number,
        dto.goals,
        dto.assists,
    )


def validate_game_statistic(statistic: GameStatistic) -> ValidationResult:
    require_input(statistic, "statistic")
    return _validate_fields(
        statistic.team_assignment_id,
        statistic.game_date,
        statistic.minutes_played,
        statistic.jersey_number,
        statistic.goals,
        statistic.assists,
    )


def _validate_fields(
    team_assignment_id: Optional[int],
    game_date: Optional[date],
    minutes_played: Optional[int],
    jersey_number: Optional[int],
    goals: Optional[int],
    assists: Optional[int],
) -> ValidationResult:
    errors: ErrorMap = {}

    check_positive_id(errors, "TeamAssignmentId", team_assignment_id, "Team assignment ID")

    if game_date is None:
        add_error(errors, "GameDate", "Game date is required.")
    elif game_date > utc_today():
        add_error(errors, "GameDate", "Game date cannot be in the future.")

    if minutes_played is None:
        add_error(errors, "MinutesPlayed", "Minutes played is required.")
    elif minutes_played < MIN_MINUTES_PLAYED:
        add_error(errors, "MinutesPlayed", "Minutes played must be a non-negative integer.")
    elif minutes_played > MAX_MINUTES_PLAYED:
        add_error(
            errors, "MinutesPlayed", f"Minutes played must not exceed {MAX_MINUTES_PLAYED}."
        )

    if jersey_number is None:
        add_error(errors, "JerseyNumber", "Jersey number is required.")
    elif jersey_number < MIN_JERSEY_NUMBER:
        add_error(errors, "JerseyNumber", "Jersey number must be a positive integer.")
    elif jersey_number > MAX_JERSEY_NUMBER:
        add_error(
            errors, "JerseyNumber", f"Jersey number must not exceed {MAX_JERSEY_NUMBER}."
        )

    for field_name, label, value in (("Goals", "Goals", goals), ("Assists", "Assists", assists)):
        if value is None:
            add_error(errors, field_name, f"{label} is required.")
        elif value < 0:
            add_error(errors, field_name, f"{label} must be a non-negative integer.")

    return build_result(errors)
