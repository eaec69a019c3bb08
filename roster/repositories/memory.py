"""In-memory repositories backed by an explicit, injectable store.

Each `InMemoryStore` is an independent arena: its own id counters and maps,
guarded by one lock. The three repositories share a store so cascades and
the assignment lookups behind statistic reads work the way the SQL tables do.
Entities are copied on the way in and on the way out, so callers never hold
a reference into the store.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional

from roster.models.game_statistics import AggregateResult, GameStatistic, aggregate_statistics
from roster.models.players import Player
from roster.models.team_assignments import TeamAssignment
from roster.repositories.errors import (
    ConcurrencyConflictError,
    DuplicateAssignmentError,
    RepositoryError,
)

logger = logging.getLogger(__name__)


@dataclass
class InMemoryStore:
    players: dict[int, Player] = field(default_factory=dict)
    assignments: dict[int, TeamAssignment] = field(default_factory=dict)
    statistics: dict[int, GameStatistic] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _counters: dict[str, int] = field(default_factory=dict, repr=False)

    def next_id(self, kind: str) -> int:
        """Allocate the next id for kind. Call with the lock held."""
        value = self._counters.get(kind, 0) + 1
        self._counters[kind] = value
        return value

    def remove_assignment_cascade(self, team_assignment_id: int) -> None:
        """Drop an assignment and its statistics. Call with the lock held."""
        self.assignments.pop(team_assignment_id, None)
        for stat_id in [
            s.id for s in self.statistics.values() if s.team_assignment_id == team_assignment_id
        ]:
            del self.statistics[stat_id]

    def has_active_duplicate(
        self,
        player_id: int,
        team_name: str,
        championship_name: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        team = team_name.strip()
        championship = championship_name.strip()
        return any(
            a.player_id == player_id
            and a.left_date is None
            and a.team_name == team
            and a.championship_name == championship
            and a.id != exclude_id
            for a in self.assignments.values()
        )


async def _yield_before_write(operation: str, entity_type: str, entity_id: Optional[int]) -> None:
    """Give the event loop a chance to cancel before the store is touched."""
    try:
        await asyncio.sleep(0)
    except asyncio.CancelledError:
        logger.warning(f"{operation} {entity_type} {entity_id} cancelled before write")
        raise


def _check_version(
    current: Optional[int], incoming: int, operation: str, entity_type: str, entity_id: int
) -> None:
    if current is None:
        logger.warning(f"{operation} {entity_type} {entity_id}: not found")
        raise RepositoryError(
            f"{entity_type} with ID {entity_id} no longer exists.",
            operation,
            entity_type,
            entity_id,
        )
    if current != incoming:
        logger.warning(
            f"{operation} {entity_type} {entity_id}: row_version {incoming} != {current}"
        )
        raise ConcurrencyConflictError(
            f"{entity_type} was modified by another user. Please refresh and try again.",
            operation,
            entity_type,
            entity_id,
        )


class InMemoryPlayerRepository:
    def __init__(self, store: Optional[InMemoryStore] = None) -> None:
        self.store = store or InMemoryStore()

    async def get_all(self) -> list[Player]:
        with self.store.lock:
            players = [replace(p) for p in self.store.players.values()]
        return sorted(players, key=lambda p: (p.name.casefold(), p.id or 0))

    async def get_by_id(self, player_id: int) -> Optional[Player]:
        with self.store.lock:
            player = self.store.players.get(player_id)
            return replace(player) if player else None

    async def exists(self, player_id: int) -> bool:
        with self.store.lock:
            return player_id in self.store.players

    async def add(self, player: Player) -> Player:
        await _yield_before_write("add", "Player", None)
        with self.store.lock:
            stored = replace(player, id=self.store.next_id("player"), row_version=1)
            self.store.players[stored.id] = stored
            logger.info(f"Added player {stored.id}")
            return replace(stored)

    async def update(self, player: Player) -> Player:
        if player.id is None:
            raise ValueError("Cannot update a player without an id.")
        await _yield_before_write("update", "Player", player.id)
        with self.store.lock:
            current = self.store.players.get(player.id)
            _check_version(
                current.row_version if current else None,
                player.row_version,
                "update",
                "Player",
                player.id,
            )
            stored = replace(player, row_version=player.row_version + 1)
            self.store.players[player.id] = stored
            return replace(stored)

    async def delete(self, player_id: int) -> bool:
        await _yield_before_write("delete", "Player", player_id)
        with self.store.lock:
            if self.store.players.pop(player_id, None) is None:
                return False
            for assignment_id in [
                a.id for a in self.store.assignments.values() if a.player_id == player_id
            ]:
                self.store.remove_assignment_cascade(assignment_id)
            logger.info(f"Deleted player {player_id}")
            return True


class InMemoryTeamAssignmentRepository:
    def __init__(self, store: Optional[InMemoryStore] = None) -> None:
        self.store = store or InMemoryStore()

    @staticmethod
    def _ordered(assignments: list[TeamAssignment]) -> list[TeamAssignment]:
        return sorted(assignments, key=lambda a: (a.joined_date, a.id or 0), reverse=True)

    async def get_all_by_player(
        self, player_id: int, include_inactive: bool = False
    ) -> list[TeamAssignment]:
        with self.store.lock:
            found = [
                replace(a)
                for a in self.store.assignments.values()
                if a.player_id == player_id and (include_inactive or a.is_active)
            ]
        return self._ordered(found)

    async def get_active_by_player(self, player_id: int) -> list[TeamAssignment]:
        return await self.get_all_by_player(player_id, include_inactive=False)

    async def get_by_id(self, team_assignment_id: int) -> Optional[TeamAssignment]:
        with self.store.lock:
            assignment = self.store.assignments.get(team_assignment_id)
            return replace(assignment) if assignment else None

    async def exists(self, team_assignment_id: int) -> bool:
        with self.store.lock:
            return team_assignment_id in self.store.assignments

    async def has_active_duplicate(
        self,
        player_id: int,
        team_name: str,
        championship_name: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        with self.store.lock:
            return self.store.has_active_duplicate(
                player_id, team_name, championship_name, exclude_id
            )

    async def add(self, assignment: TeamAssignment) -> TeamAssignment:
        await _yield_before_write("add", "TeamAssignment", None)
        with self.store.lock:
            if assignment.player_id not in self.store.players:
                raise RepositoryError(
                    f"Player with ID {assignment.player_id} does not exist.",
                    "add",
                    "TeamAssignment",
                )
            if assignment.is_active and self.store.has_active_duplicate(
                assignment.player_id, assignment.team_name, assignment.championship_name
            ):
                raise DuplicateAssignmentError(
                    "Player already has an active assignment to this team and championship.",
                    "add",
                    "TeamAssignment",
                )
            stored = replace(
                assignment, id=self.store.next_id("team_assignment"), row_version=1
            )
            self.store.assignments[stored.id] = stored
            logger.info(f"Added team assignment {stored.id} for player {stored.player_id}")
            return replace(stored)

    async def update(self, assignment: TeamAssignment) -> TeamAssignment:
        if assignment.id is None:
            raise ValueError("Cannot update a team assignment without an id.")
        await _yield_before_write("update", "TeamAssignment", assignment.id)
        with self.store.lock:
            current = self.store.assignments.get(assignment.id)
            _check_version(
                current.row_version if current else None,
                assignment.row_version,
                "update",
                "TeamAssignment",
                assignment.id,
            )
            if assignment.is_active and self.store.has_active_duplicate(
                assignment.player_id,
                assignment.team_name,
                assignment.championship_name,
                exclude_id=assignment.id,
            ):
                raise DuplicateAssignmentError(
                    "Player already has an active assignment to this team and championship.",
                    "update",
                    "TeamAssignment",
                    assignment.id,
                )
            stored = replace(assignment, row_version=assignment.row_version + 1)
            self.store.assignments[assignment.id] = stored
            return replace(stored)

    async def delete(self, team_assignment_id: int) -> bool:
        await _yield_before_write("delete", "TeamAssignment", team_assignment_id)
        with self.store.lock:
            if team_assignment_id not in self.store.assignments:
                return False
            self.store.remove_assignment_cascade(team_assignment_id)
            logger.info(f"Deleted team assignment {team_assignment_id}")
            return True


class InMemoryGameStatisticRepository:
    def __init__(self, store: Optional[InMemoryStore] = None) -> None:
        self.store = store or InMemoryStore()

    def _with_team(self, statistic: GameStatistic) -> GameStatistic:
        """Copy statistic, filling in the owning assignment's names. Lock held."""
        assignment = self.store.assignments.get(statistic.team_assignment_id)
        if assignment is None:
            return replace(statistic)
        return replace(
            statistic,
            team_name=assignment.team_name,
            championship_name=assignment.championship_name,
        )

    def _player_assignment_ids(self, player_id: int) -> set[int]:
        return {
            a.id  # type: ignore[misc]
            for a in self.store.assignments.values()
            if a.player_id == player_id
        }

    @staticmethod
    def _ordered(statistics: list[GameStatistic]) -> list[GameStatistic]:
        return sorted(statistics, key=lambda s: (s.game_date, s.id or 0), reverse=True)

    async def get_all_by_player(self, player_id: int) -> list[GameStatistic]:
        with self.store.lock:
            assignment_ids = self._player_assignment_ids(player_id)
            found = [
                self._with_team(s)
                for s in self.store.statistics.values()
                if s.team_assignment_id in assignment_ids
            ]
        return self._ordered(found)

    async def get_all_by_assignment(self, team_assignment_id: int) -> list[GameStatistic]:
        with self.store.lock:
            found = [
                self._with_team(s)
                for s in self.store.statistics.values()
                if s.team_assignment_id == team_assignment_id
            ]
        return self._ordered(found)

    async def get_by_date_range(
        self, player_id: int, start_date: date, end_date: date
    ) -> list[GameStatistic]:
        with self.store.lock:
            assignment_ids = self._player_assignment_ids(player_id)
            found = [
                self._with_team(s)
                for s in self.store.statistics.values()
                if s.team_assignment_id in assignment_ids
                and start_date <= s.game_date <= end_date
            ]
        return self._ordered(found)

    async def get_by_id(self, game_statistic_id: int) -> Optional[GameStatistic]:
        with self.store.lock:
            statistic = self.store.statistics.get(game_statistic_id)
            return self._with_team(statistic) if statistic else None

    async def exists(self, game_statistic_id: int) -> bool:
        with self.store.lock:
            return game_statistic_id in self.store.statistics

    async def add(self, statistic: GameStatistic) -> GameStatistic:
        await _yield_before_write("add", "GameStatistic", None)
        with self.store.lock:
            if statistic.team_assignment_id not in self.store.assignments:
                raise RepositoryError(
                    f"Team assignment with ID {statistic.team_assignment_id} does not exist.",
                    "add",
                    "GameStatistic",
                )
            stored = replace(
                statistic,
                id=self.store.next_id("game_statistic"),
                row_version=1,
                team_name=None,
                championship_name=None,
            )
            self.store.statistics[stored.id] = stored
            logger.info(f"Added game statistic {stored.id}")
            return self._with_team(stored)

    async def update(self, statistic: GameStatistic) -> GameStatistic:
        if statistic.id is None:
            raise ValueError("Cannot update a game statistic without an id.")
        await _yield_before_write("update", "GameStatistic", statistic.id)
        with self.store.lock:
            current = self.store.statistics.get(statistic.id)
            _check_version(
                current.row_version if current else None,
                statistic.row_version,
                "update",
                "GameStatistic",
                statistic.id,
            )
            if statistic.team_assignment_id not in self.store.assignments:
                raise RepositoryError(
                    f"Team assignment with ID {statistic.team_assignment_id} does not exist.",
                    "update",
                    "GameStatistic",
                    statistic.id,
                )
            stored = replace(
                statistic,
                row_version=statistic.row_version + 1,
                team_name=None,
                championship_name=None,
            )
            self.store.statistics[statistic.id] = stored
            return self._with_team(stored)

    async def delete(self, game_statistic_id: int) -> bool:
        await _yield_before_write("delete", "GameStatistic", game_statistic_id)
        with self.store.lock:
            removed = self.store.statistics.pop(game_statistic_id, None)
        if removed is not None:
            logger.info(f"Deleted game statistic {game_statistic_id}")
        return removed is not None

    async def get_aggregates(
        self, player_id: int, team_assignment_id: Optional[int] = None
    ) -> AggregateResult:
        with self.store.lock:
            assignment_ids = self._player_assignment_ids(player_id)
            if team_assignment_id is not None:
                assignment_ids &= {team_assignment_id}
            return aggregate_statistics(
                s for s in self.store.statistics.values() if s.team_assignment_id in assignment_ids
            )
