"""Shared fixtures: an isolated in-memory store per test and services over it."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from pydantic import ValidationError

from roster.repositories.memory import (
    InMemoryGameStatisticRepository,
    InMemoryPlayerRepository,
    InMemoryStore,
    InMemoryTeamAssignmentRepository,
)
from roster.services.game_statistic_service import GameStatisticService
from roster.services.player_service import PlayerService
from roster.services.team_assignment_service import TeamAssignmentService

load_dotenv()


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def player_repo(store: InMemoryStore) -> InMemoryPlayerRepository:
    return InMemoryPlayerRepository(store)


@pytest.fixture()
def assignment_repo(store: InMemoryStore) -> InMemoryTeamAssignmentRepository:
    return InMemoryTeamAssignmentRepository(store)


@pytest.fixture()
def statistic_repo(store: InMemoryStore) -> InMemoryGameStatisticRepository:
    return InMemoryGameStatisticRepository(store)


@pytest.fixture()
def player_service(player_repo: InMemoryPlayerRepository) -> PlayerService:
    return PlayerService(player_repo)


@pytest.fixture()
def assignment_service(
    assignment_repo: InMemoryTeamAssignmentRepository,
    player_repo: InMemoryPlayerRepository,
) -> TeamAssignmentService:
    return TeamAssignmentService(assignment_repo, player_repo)


@pytest.fixture()
def statistic_service(
    statistic_repo: InMemoryGameStatisticRepository,
    assignment_repo: InMemoryTeamAssignmentRepository,
) -> GameStatisticService:
    return GameStatisticService(statistic_repo, assignment_repo)


@pytest_asyncio.fixture()
async def app_client(
    player_repo: InMemoryPlayerRepository,
    assignment_repo: InMemoryTeamAssignmentRepository,
    statistic_repo: InMemoryGameStatisticRepository,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an HTTP client with the application wired to the in-memory store."""
    try:
        from roster.main import app
    except ValidationError as exc:  # pragma: no cover - guard for misconfigured env
        pytest.skip(f"App configuration failed: {exc}")

    from roster.routes.deps import (
        get_game_statistic_repository,
        get_player_repository,
        get_team_assignment_repository,
    )

    overrides = {
        get_player_repository: lambda: player_repo,
        get_team_assignment_repository: lambda: assignment_repo,
        get_game_statistic_repository: lambda: statistic_repo,
    }
    app.dependency_overrides.update(overrides)
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Ensure HTTPX uses asyncio backend during tests."""
    return "asyncio"
