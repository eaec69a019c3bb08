"""SQL repositories and services over an async SQLite database.

Runs in the default suite; the Postgres-only checks live in tests/integration.
"""

from dataclasses import replace
from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import DateTime, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from roster.models.results import ErrorKind
from roster.models.team_assignments import TeamAssignmentUpdate
from roster.repositories.errors import ConcurrencyConflictError, DuplicateAssignmentError
from roster.repositories.sql import (
    SqlGameStatisticRepository,
    SqlPlayerRepository,
    SqlTeamAssignmentRepository,
)
from roster.schemas.game_statistics import GameStatisticRecord
from roster.schemas.players import PlayerRecord
from roster.schemas.team_assignments import TeamAssignmentRecord
from roster.services.game_statistic_service import GameStatisticService
from roster.services.player_service import PlayerService
from roster.services.team_assignment_service import TeamAssignmentService
from roster.utils.db_async import import_table_modules
from tests.factories import ACTOR, assignment_payload, player_payload, statistic_payload


@pytest_asyncio.fixture()
async def sqlite_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    import_table_modules()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'roster.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def sqlite_session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(sqlite_engine, expire_on_commit=False, class_=AsyncSession)
    async with factory() as session:
        yield session


@pytest.fixture()
def sql_services(sqlite_session: AsyncSession):
    players = SqlPlayerRepository(sqlite_session)
    assignments = SqlTeamAssignmentRepository(sqlite_session)
    statistics = SqlGameStatisticRepository(sqlite_session)
    return (
        PlayerService(players),
        TeamAssignmentService(assignments, players),
        GameStatisticService(statistics, assignments),
    )


@pytest.mark.parametrize("record", [PlayerRecord, TeamAssignmentRecord, GameStatisticRecord])
def test_audit_timestamps_are_naive_datetime_columns(record) -> None:
    for column_name in ("created_at", "updated_at"):
        column_type = record.__table__.c[column_name].type
        assert type(column_type) is DateTime
        assert column_type.timezone is False


@pytest.mark.asyncio
async def test_create_player_persists_through_sql_repository(sql_services) -> None:
    player_service, _, _ = sql_services
    created = await player_service.create_player(player_payload(), ACTOR)
    assert created.success, created.error_messages
    assert created.data.id is not None
    assert created.data.created_at.tzinfo is None
    assert created.data.created_by == ACTOR

    fetched = await player_service.get_player_by_id(created.data.id)
    assert fetched.data.name == "Jane Doe"
    assert fetched.data.date_of_birth == date(2010, 5, 15)


@pytest.mark.asyncio
async def test_assignment_lifecycle_and_aggregates(sql_services) -> None:
    player_service, assignment_service, statistic_service = sql_services
    player_id = (await player_service.create_player(player_payload(), ACTOR)).data.id

    first = await assignment_service.add_player_to_team(assignment_payload(player_id), ACTOR)
    assert first.success and first.data.is_active

    duplicate = await assignment_service.add_player_to_team(assignment_payload(player_id), ACTOR)
    assert "DuplicateAssignment" in duplicate.validation_errors

    left = await assignment_service.remove_player_from_team(
        first.data.id, date(2024, 6, 1), ACTOR
    )
    assert left.success and not left.data.is_active

    rejoined = await assignment_service.add_player_to_team(
        assignment_payload(player_id, joined_date=date(2024, 6, 15)), ACTOR
    )
    assert rejoined.success

    reactivate = await assignment_service.update_assignment(
        first.data.id,
        TeamAssignmentUpdate(
            team_assignment_id=first.data.id,
            team_name="Lions",
            championship_name="Spring 2024",
            joined_date=date(2024, 1, 10),
            left_date=None,
        ),
        ACTOR,
    )
    assert reactivate.error_kind is ErrorKind.CONFLICT

    await statistic_service.add_statistic(statistic_payload(rejoined.data.id), ACTOR)
    await statistic_service.add_statistic(
        statistic_payload(rejoined.data.id, game_date=date(2024, 7, 1), goals=1, assists=2),
        ACTOR,
    )
    aggregates = await statistic_service.get_aggregates(player_id)
    assert aggregates.data.game_count == 2
    assert aggregates.data.total_goals == 3
    assert aggregates.data.average_goals == 1.5

    assert (await player_service.delete_player(player_id)).data is True
    remaining = await statistic_service.get_statistics_by_player(player_id)
    assert remaining.data == []
    missing = await assignment_service.get_assignment_by_id(rejoined.data.id)
    assert missing.error_kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_stale_update_raises_conflict(sqlite_session) -> None:
    players = SqlPlayerRepository(sqlite_session)
    created = await players.add(player_payload().to_entity(ACTOR))
    stale = replace(created)

    updated = await players.update(replace(created, name="Janet Doe"))
    assert updated.row_version == 2

    with pytest.raises(ConcurrencyConflictError):
        await players.update(replace(stale, name="Stale"))


@pytest.mark.asyncio
async def test_unique_index_rejects_second_active_assignment(
    sqlite_session, monkeypatch
) -> None:
    players = SqlPlayerRepository(sqlite_session)
    assignments = SqlTeamAssignmentRepository(sqlite_session)
    player = await players.add(player_payload().to_entity(ACTOR))
    await assignments.add(assignment_payload(player.id).to_entity(ACTOR))

    async def _no_duplicate(*args, **kwargs) -> bool:
        return False

    # Simulate a writer that raced past the in-transaction check
    monkeypatch.setattr(
        SqlTeamAssignmentRepository, "_active_duplicate", staticmethod(_no_duplicate)
    )
    with pytest.raises(DuplicateAssignmentError):
        await assignments.add(assignment_payload(player.id).to_entity(ACTOR))

    active = await assignments.get_active_by_player(player.id)
    assert len(active) == 1
