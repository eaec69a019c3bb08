"""SQL repository tests against a live Postgres database."""

import asyncio
from dataclasses import replace
from datetime import date

import pytest

from roster.repositories.errors import (
    ConcurrencyConflictError,
    DuplicateAssignmentError,
    RepositoryError,
)
from roster.repositories.sql import (
    SqlGameStatisticRepository,
    SqlPlayerRepository,
    SqlTeamAssignmentRepository,
)
from roster.services.team_assignment_service import TeamAssignmentService
from tests.factories import ACTOR, assignment_payload, player_payload, statistic_payload

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_player_round_trip_and_conflict(db_session) -> None:
    players = SqlPlayerRepository(db_session)
    created = await players.add(player_payload().to_entity(ACTOR))
    assert created.id is not None
    assert created.row_version == 1

    stale = replace(created)
    created.name = "Janet Doe"
    updated = await players.update(created)
    assert updated.row_version == 2
    assert updated.name == "Janet Doe"

    with pytest.raises(ConcurrencyConflictError):
        await players.update(replace(stale, name="Stale"))

    assert await players.delete(created.id) is True
    assert await players.get_by_id(created.id) is None
    with pytest.raises(RepositoryError):
        await players.update(updated)


@pytest.mark.asyncio
async def test_duplicate_active_assignment_detected(db_session) -> None:
    players = SqlPlayerRepository(db_session)
    assignments = SqlTeamAssignmentRepository(db_session)
    player = await players.add(player_payload().to_entity(ACTOR))
    first = await assignments.add(assignment_payload(player.id).to_entity(ACTOR))

    assert await assignments.has_active_duplicate(player.id, "Lions", "Spring 2024")
    assert not await assignments.has_active_duplicate(
        player.id, "Lions", "Spring 2024", exclude_id=first.id
    )
    with pytest.raises(DuplicateAssignmentError):
        await assignments.add(assignment_payload(player.id).to_entity(ACTOR))

    first.mark_as_left(date(2024, 6, 1), ACTOR)
    await assignments.update(first)
    rejoined = await assignments.add(
        assignment_payload(player.id, joined_date=date(2024, 6, 15)).to_entity(ACTOR)
    )
    history = await assignments.get_all_by_player(player.id, include_inactive=True)
    assert [a.id for a in history] == [rejoined.id, first.id]


@pytest.mark.asyncio
async def test_concurrent_adds_leave_one_active_assignment(session_factory) -> None:
    async with session_factory() as session:
        player = await SqlPlayerRepository(session).add(player_payload().to_entity(ACTOR))

    async def _add() -> bool:
        async with session_factory() as session:
            service = TeamAssignmentService(
                SqlTeamAssignmentRepository(session), SqlPlayerRepository(session)
            )
            result = await service.add_player_to_team(assignment_payload(player.id), ACTOR)
            return result.success

    outcomes = await asyncio.gather(*(_add() for _ in range(5)))
    assert outcomes.count(True) == 1

    async with session_factory() as session:
        active = await SqlTeamAssignmentRepository(session).get_active_by_player(player.id)
    assert len(active) == 1


@pytest.mark.asyncio
async def test_statistics_reads_and_aggregates(db_session) -> None:
    players = SqlPlayerRepository(db_session)
    assignments = SqlTeamAssignmentRepository(db_session)
    statistics = SqlGameStatisticRepository(db_session)

    player = await players.add(player_payload().to_entity(ACTOR))
    lions = await assignments.add(assignment_payload(player.id).to_entity(ACTOR))
    tigers = await assignments.add(
        assignment_payload(player.id, team_name="Tigers").to_entity(ACTOR)
    )
    await statistics.add(statistic_payload(lions.id).to_entity(ACTOR))
    await statistics.add(
        statistic_payload(lions.id, game_date=date(2024, 2, 8), goals=1).to_entity(ACTOR)
    )
    latest = await statistics.add(
        statistic_payload(tigers.id, game_date=date(2024, 3, 1), goals=0).to_entity(ACTOR)
    )
    assert latest.team_name == "Tigers"

    listed = await statistics.get_all_by_player(player.id)
    assert [s.game_date for s in listed] == [
        date(2024, 3, 1),
        date(2024, 2, 8),
        date(2024, 2, 1),
    ]

    overall = await statistics.get_aggregates(player.id)
    assert (overall.game_count, overall.total_goals) == (3, 3)
    assert overall.average_goals == 1.0

    scoped = await statistics.get_aggregates(player.id, team_assignment_id=lions.id)
    assert scoped.game_count == 2
    assert scoped.average_minutes == 90.0

    empty = await statistics.get_aggregates(player.id + 1)
    assert empty.game_count == 0
    assert empty.average_goals == 0.0

    assert await assignments.delete(lions.id) is True
    assert [s.id for s in await statistics.get_all_by_player(player.id)] == [latest.id]
