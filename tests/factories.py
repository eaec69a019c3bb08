"""Payload builders shared across test modules."""

from datetime import date

from roster.models.game_statistics import GameStatisticCreate
from roster.models.players import PlayerCreate
from roster.models.team_assignments import TeamAssignmentCreate

ACTOR = "coach-1"


def player_payload(**overrides) -> PlayerCreate:
    data = {
        "user_id": "parent-1",
        "name": "Jane Doe",
        "date_of_birth": date(2010, 5, 15),
        "gender": "Female",
        "photo_url": None,
    }
    data.update(overrides)
    return PlayerCreate(**data)


def assignment_payload(player_id: int, **overrides) -> TeamAssignmentCreate:
    data = {
        "player_id": player_id,
        "team_name": "Lions",
        "championship_name": "Spring 2024",
        "joined_date": date(2024, 1, 10),
    }
    data.update(overrides)
    return TeamAssignmentCreate(**data)


def statistic_payload(team_assignment_id: int, **overrides) -> GameStatisticCreate:
    data = {
        "team_assignment_id": team_assignment_id,
        "game_date": date(2024, 2, 1),
        "minutes_played": 90,
        "is_starter": True,
        "jersey_number": 9,
        "goals": 2,
        "assists": 1,
    }
    data.update(overrides)
    return GameStatisticCreate(**data)

