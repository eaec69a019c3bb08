"""SQLAlchemy (AsyncSession) repositories over the SQLModel tables.

Every operation runs in its own transaction (`session.begin()`), or in a
savepoint when the caller already holds one open, so a write that fails or
is cancelled part-way rolls back entirely. Updates are conditional on the
loaded `row_version`; a zero-row update is reported as a concurrency
conflict when the row still exists and as a missing row otherwise.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
from typing import Any, Optional

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from roster.models.game_statistics import AggregateResult, GameStatistic
from roster.models.players import Player
from roster.models.team_assignments import TeamAssignment
from roster.repositories.errors import (
    ConcurrencyConflictError,
    DuplicateAssignmentError,
    RepositoryError,
)
from roster.schemas.game_statistics import GameStatisticRecord
from roster.schemas.players import PlayerRecord
from roster.schemas.team_assignments import ACTIVE_ASSIGNMENT_INDEX, TeamAssignmentRecord

logger = logging.getLogger(__name__)

_AUDIT_INSERT_ONLY = {"id", "created_at", "created_by", "row_version"}
# SQLite names the columns of a violated unique index, not the index itself
_SQLITE_ACTIVE_ASSIGNMENT = (
    "team_assignments.player_id, team_assignments.team_name, "
    "team_assignments.championship_name"
)


def _conflict(entity_type: str, operation: str, entity_id: Optional[int]) -> ConcurrencyConflictError:
    return ConcurrencyConflictError(
        f"{entity_type} was modified by another user. Please refresh and try again.",
        operation,
        entity_type,
        entity_id,
    )


class _SqlRepository:
    entity_type = "Entity"
    record: Any = None

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _transaction(
        self, operation: str, entity_id: Optional[int] = None
    ) -> AsyncIterator[AsyncSession]:
        """Scope one repository call and translate storage faults."""
        logger.debug(f"{operation} {self.entity_type} id={entity_id}")
        tx = (
            self.session.begin_nested()
            if self.session.in_transaction()
            else self.session.begin()
        )
        try:
            async with tx:
                yield self.session
        except asyncio.CancelledError:
            logger.warning(f"{operation} {self.entity_type} {entity_id} cancelled; rolled back")
            raise
        except RepositoryError:
            raise
        except StaleDataError as exc:
            logger.warning(f"{operation} {self.entity_type} {entity_id}: stale data")
            raise _conflict(self.entity_type, operation, entity_id) from exc
        except IntegrityError as exc:
            raise self._integrity_error(exc, operation, entity_id) from exc
        except SQLAlchemyError as exc:
            logger.exception(f"{operation} {self.entity_type} {entity_id} failed")
            raise RepositoryError(
                f"Unable to {operation} {self.entity_type}.",
                operation,
                self.entity_type,
                entity_id,
            ) from exc

    def _integrity_error(
        self, exc: IntegrityError, operation: str, entity_id: Optional[int]
    ) -> RepositoryError:
        logger.error(f"{operation} {self.entity_type} {entity_id} violated a constraint: {exc.orig}")
        return RepositoryError(
            f"Unable to {operation} {self.entity_type}: a related record is missing or invalid.",
            operation,
            self.entity_type,
            entity_id,
        )

    async def _exists(self, session: AsyncSession, entity_id: int) -> bool:
        result = await session.execute(
            select(self.record.id).where(self.record.id == entity_id)
        )
        return result.first() is not None

    async def exists(self, entity_id: int) -> bool:
        async with self._transaction("exists", entity_id) as session:
            return await self._exists(session, entity_id)

    async def _update_row(
        self, session: AsyncSession, entity_id: int, row_version: int, values: dict[str, Any]
    ) -> None:
        """Conditional UPDATE on row_version; raises when no row matched."""
        result = await session.execute(
            update(self.record)
            .where(self.record.id == entity_id, self.record.row_version == row_version)
            .values(**values, row_version=self.record.row_version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:  # type: ignore[attr-defined]
            return
        if await self._exists(session, entity_id):
            logger.warning(f"update {self.entity_type} {entity_id}: row_version {row_version} is stale")
            raise _conflict(self.entity_type, "update", entity_id)
        logger.warning(f"update {self.entity_type} {entity_id}: not found")
        raise RepositoryError(
            f"{self.entity_type} with ID {entity_id} no longer exists.",
            "update",
            self.entity_type,
            entity_id,
        )

    async def delete(self, entity_id: int) -> bool:
        """Delete by id; child rows go with it through ON DELETE CASCADE."""
        async with self._transaction("delete", entity_id) as session:
            result = await session.execute(
                delete(self.record).where(self.record.id == entity_id)
            )
            deleted = bool(result.rowcount)  # type: ignore[attr-defined]
        if deleted:
            logger.info(f"Deleted {self.entity_type} {entity_id}")
        return deleted


def _player_from_record(record: PlayerRecord) -> Player:
    return Player(**record.model_dump())


def _assignment_from_record(record: TeamAssignmentRecord) -> TeamAssignment:
    return TeamAssignment(**record.model_dump())


def _statistic_from_record(
    record: GameStatisticRecord,
    team_name: Optional[str] = None,
    championship_name: Optional[str] = None,
) -> GameStatistic:
    return GameStatistic(
        **record.model_dump(), team_name=team_name, championship_name=championship_name
    )


def _mutable_values(entity: Any, skip: frozenset[str] = frozenset()) -> dict[str, Any]:
    return {
        key: value
        for key, value in asdict(entity).items()
        if key not in _AUDIT_INSERT_ONLY and key not in skip
    }


class SqlPlayerRepository(_SqlRepository):
    entity_type = "Player"
    record = PlayerRecord

    async def get_all(self) -> list[Player]:
        async with self._transaction("get_all") as session:
            result = await session.execute(
                select(PlayerRecord).order_by(PlayerRecord.name, PlayerRecord.id)
            )
            return [_player_from_record(r) for r in result.scalars().all()]

    async def get_by_id(self, player_id: int) -> Optional[Player]:
        async with self._transaction("get_by_id", player_id) as session:
            record = await session.get(PlayerRecord, player_id, populate_existing=True)
            return _player_from_record(record) if record else None

    async def add(self, player: Player) -> Player:
        async with self._transaction("add") as session:
            record = PlayerRecord(
                **{k: v for k, v in asdict(player).items() if k not in {"id", "row_version"}}
            )
            session.add(record)
            await session.flush()
            added = _player_from_record(record)
        logger.info(f"Added player {added.id}")
        return added

    async def update(self, player: Player) -> Player:
        if player.id is None:
            raise ValueError("Cannot update a player without an id.")
        async with self._transaction("update", player.id) as session:
            await self._update_row(
                session, player.id, player.row_version, _mutable_values(player, frozenset({"user_id"}))
            )
            record = await session.get(PlayerRecord, player.id, populate_existing=True)
            assert record is not None
            updated = _player_from_record(record)
        logger.info(f"Updated player {player.id}")
        return updated


class SqlTeamAssignmentRepository(_SqlRepository):
    entity_type = "TeamAssignment"
    record = TeamAssignmentRecord

    def _integrity_error(
        self, exc: IntegrityError, operation: str, entity_id: Optional[int]
    ) -> RepositoryError:
        message = str(exc.orig)
        if ACTIVE_ASSIGNMENT_INDEX in message or _SQLITE_ACTIVE_ASSIGNMENT in message:
            logger.warning(f"{operation} TeamAssignment {entity_id}: duplicate active assignment")
            return DuplicateAssignmentError(
                "Player already has an active assignment to this team and championship.",
                operation,
                self.entity_type,
                entity_id,
            )
        return super()._integrity_error(exc, operation, entity_id)

    @staticmethod
    async def _active_duplicate(
        session: AsyncSession,
        player_id: int,
        team_name: str,
        championship_name: str,
        exclude_id: Optional[int],
    ) -> bool:
        stmt = select(TeamAssignmentRecord.id).where(
            TeamAssignmentRecord.player_id == player_id,
            TeamAssignmentRecord.team_name == team_name.strip(),
            TeamAssignmentRecord.championship_name == championship_name.strip(),
            TeamAssignmentRecord.left_date.is_(None),  # type: ignore[union-attr]
        )
        if exclude_id is not None:
            stmt = stmt.where(TeamAssignmentRecord.id != exclude_id)
        result = await session.execute(stmt.limit(1))
        return result.first() is not None

    async def has_active_duplicate(
        self,
        player_id: int,
        team_name: str,
        championship_name: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        async with self._transaction("has_active_duplicate", exclude_id) as session:
            return await self._active_duplicate(
                session, player_id, team_name, championship_name, exclude_id
            )

    async def get_all_by_player(
        self, player_id: int, include_inactive: bool = False
    ) -> list[TeamAssignment]:
        stmt = select(TeamAssignmentRecord).where(TeamAssignmentRecord.player_id == player_id)
        if not include_inactive:
            stmt = stmt.where(TeamAssignmentRecord.left_date.is_(None))  # type: ignore[union-attr]
        stmt = stmt.order_by(
            desc(TeamAssignmentRecord.joined_date), desc(TeamAssignmentRecord.id)  # type: ignore[arg-type]
        )
        async with self._transaction("get_all_by_player") as session:
            result = await session.execute(stmt)
            return [_assignment_from_record(r) for r in result.scalars().all()]

    async def get_active_by_player(self, player_id: int) -> list[TeamAssignment]:
        return await self.get_all_by_player(player_id, include_inactive=False)

    async def get_by_id(self, team_assignment_id: int) -> Optional[TeamAssignment]:
        async with self._transaction("get_by_id", team_assignment_id) as session:
            record = await session.get(
                TeamAssignmentRecord, team_assignment_id, populate_existing=True
            )
            return _assignment_from_record(record) if record else None

    async def add(self, assignment: TeamAssignment) -> TeamAssignment:
        async with self._transaction("add") as session:
            # Checked in the same transaction as the insert; the partial
            # unique index catches writers that race past it.
            if assignment.is_active and await self._active_duplicate(
                session,
                assignment.player_id,
                assignment.team_name,
                assignment.championship_name,
                None,
            ):
                raise DuplicateAssignmentError(
                    "Player already has an active assignment to this team and championship.",
                    "add",
                    self.entity_type,
                )
            record = TeamAssignmentRecord(
                **{k: v for k, v in asdict(assignment).items() if k not in {"id", "row_version"}}
            )
            session.add(record)
            await session.flush()
            added = _assignment_from_record(record)
        logger.info(f"Added team assignment {added.id} for player {added.player_id}")
        return added

    async def update(self, assignment: TeamAssignment) -> TeamAssignment:
        if assignment.id is None:
            raise ValueError("Cannot update a team assignment without an id.")
        async with self._transaction("update", assignment.id) as session:
            if assignment.is_active and await self._active_duplicate(
                session,
                assignment.player_id,
                assignment.team_name,
                assignment.championship_name,
                assignment.id,
            ):
                raise DuplicateAssignmentError(
                    "Player already has an active assignment to this team and championship.",
                    "update",
                    self.entity_type,
                    assignment.id,
                )
            await self._update_row(
                session,
                assignment.id,
                assignment.row_version,
                _mutable_values(assignment, frozenset({"player_id"})),
            )
            record = await session.get(
                TeamAssignmentRecord, assignment.id, populate_existing=True
            )
            assert record is not None
            updated = _assignment_from_record(record)
        logger.info(f"Updated team assignment {assignment.id}")
        return updated


class SqlGameStatisticRepository(_SqlRepository):
    entity_type = "GameStatistic"
    record = GameStatisticRecord

    @staticmethod
    def _select_with_team() -> Any:
        return select(
            GameStatisticRecord,
            TeamAssignmentRecord.team_name,
            TeamAssignmentRecord.championship_name,
        ).join(
            TeamAssignmentRecord,
            TeamAssignmentRecord.id == GameStatisticRecord.team_assignment_id,  # type: ignore[arg-type]
        )

    async def _fetch(self, operation: str, stmt: Any) -> list[GameStatistic]:
        stmt = stmt.order_by(
            desc(GameStatisticRecord.game_date), desc(GameStatisticRecord.id)  # type: ignore[arg-type]
        )
        async with self._transaction(operation) as session:
            result = await session.execute(stmt)
            return [_statistic_from_record(*row) for row in result.all()]

    async def _load(self, session: AsyncSession, game_statistic_id: int) -> Optional[GameStatistic]:
        result = await session.execute(
            self._select_with_team()
            .where(GameStatisticRecord.id == game_statistic_id)
            .execution_options(populate_existing=True)
        )
        row = result.first()
        return _statistic_from_record(*row) if row else None

    async def get_all_by_player(self, player_id: int) -> list[GameStatistic]:
        return await self._fetch(
            "get_all_by_player",
            self._select_with_team().where(TeamAssignmentRecord.player_id == player_id),
        )

    async def get_all_by_assignment(self, team_assignment_id: int) -> list[GameStatistic]:
        return await self._fetch(
            "get_all_by_assignment",
            self._select_with_team().where(
                GameStatisticRecord.team_assignment_id == team_assignment_id
            ),
        )

    async def get_by_date_range(
        self, player_id: int, start_date: date, end_date: date
    ) -> list[GameStatistic]:
        return await self._fetch(
            "get_by_date_range",
            self._select_with_team().where(
                TeamAssignmentRecord.player_id == player_id,
                GameStatisticRecord.game_date >= start_date,
                GameStatisticRecord.game_date <= end_date,
            ),
        )

    async def get_by_id(self, game_statistic_id: int) -> Optional[GameStatistic]:
        async with self._transaction("get_by_id", game_statistic_id) as session:
            return await self._load(session, game_statistic_id)

    async def add(self, statistic: GameStatistic) -> GameStatistic:
        values = {
            k: v
            for k, v in asdict(statistic).items()
            if k not in {"id", "row_version", "team_name", "championship_name"}
        }
        async with self._transaction("add") as session:
            record = GameStatisticRecord(**values)
            session.add(record)
            await session.flush()
            added = await self._load(session, record.id)  # type: ignore[arg-type]
        assert added is not None
        logger.info(f"Added game statistic {added.id}")
        return added

    async def update(self, statistic: GameStatistic) -> GameStatistic:
        if statistic.id is None:
            raise ValueError("Cannot update a game statistic without an id.")
        async with self._transaction("update", statistic.id) as session:
            await self._update_row(
                session,
                statistic.id,
                statistic.row_version,
                _mutable_values(statistic, frozenset({"team_name", "championship_name"})),
            )
            updated = await self._load(session, statistic.id)
        assert updated is not None
        logger.info(f"Updated game statistic {statistic.id}")
        return updated

    async def get_aggregates(
        self, player_id: int, team_assignment_id: Optional[int] = None
    ) -> AggregateResult:
        """Count and sums in one query; averages are derived from the totals."""
        stmt = (
            select(
                func.count(GameStatisticRecord.id),
                func.coalesce(func.sum(GameStatisticRecord.goals), 0),
                func.coalesce(func.sum(GameStatisticRecord.assists), 0),
                func.coalesce(func.sum(GameStatisticRecord.minutes_played), 0),
            )  # type: ignore[call-overload]
            .select_from(GameStatisticRecord)
            .join(
                TeamAssignmentRecord,
                TeamAssignmentRecord.id == GameStatisticRecord.team_assignment_id,
            )
            .where(TeamAssignmentRecord.player_id == player_id)
        )
        if team_assignment_id is not None:
            stmt = stmt.where(GameStatisticRecord.team_assignment_id == team_assignment_id)
        async with self._transaction("get_aggregates") as session:
            row = (await session.execute(stmt)).one()
        return AggregateResult.from_totals(int(row[0]), int(row[1]), int(row[2]), int(row[3]))
