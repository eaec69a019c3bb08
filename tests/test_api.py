"""HTTP adapter tests against the in-memory store."""

import pytest

HEADERS = {"X-Actor-Id": "coach-1"}

PLAYER = {
    "user_id": "parent-1",
    "name": "Jane Doe",
    "date_of_birth": "2010-05-15",
    "gender": "female",
}


async def _create_player(client) -> int:
    response = await client.post("/players", json=PLAYER, headers=HEADERS)
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _create_assignment(client, player_id: int, **overrides) -> dict:
    payload = {
        "player_id": player_id,
        "team_name": "Lions",
        "championship_name": "Spring 2024",
        "joined_date": "2024-01-10",
    }
    payload.update(overrides)
    return (await client.post("/team-assignments", json=payload, headers=HEADERS)).json()


@pytest.mark.asyncio
async def test_health(app_client) -> None:
    response = await app_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_create_player_returns_read_model(app_client) -> None:
    response = await app_client.post("/players", json=PLAYER, headers=HEADERS)
    assert response.status_code == 201
    body = response.json()
    assert body["gender"] == "Female"
    assert body["created_by"] == "coach-1"
    assert isinstance(body["age"], int)


@pytest.mark.asyncio
async def test_actor_header_is_required(app_client) -> None:
    response = await app_client.post("/players", json=PLAYER)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_validation_errors_map_to_422(app_client) -> None:
    response = await app_client.post(
        "/players", json={**PLAYER, "photo_url": "not-a-url"}, headers=HEADERS
    )
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert "PhotoUrl" in detail["validation_errors"]


@pytest.mark.asyncio
async def test_missing_player_maps_to_404(app_client) -> None:
    response = await app_client.get("/players/41")
    assert response.status_code == 404
    assert response.json()["detail"]["error_messages"] == [
        "Player with ID 41 could not be found."
    ]


@pytest.mark.asyncio
async def test_update_mismatch_maps_to_400(app_client) -> None:
    player_id = await _create_player(app_client)
    assignment = await _create_assignment(app_client, player_id)
    response = await app_client.put(
        f"/team-assignments/{assignment['id']}",
        json={
            "team_assignment_id": assignment["id"] + 1,
            "team_name": "Lions",
            "championship_name": "Spring 2024",
            "joined_date": "2024-01-10",
        },
        headers=HEADERS,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_assignment_and_leave_flow(app_client) -> None:
    player_id = await _create_player(app_client)
    first = await _create_assignment(app_client, player_id)
    assert first["is_active"] is True

    duplicate = await app_client.post(
        "/team-assignments",
        json={
            "player_id": player_id,
            "team_name": "Lions",
            "championship_name": "Spring 2024",
            "joined_date": "2024-02-01",
        },
        headers=HEADERS,
    )
    assert duplicate.status_code == 422
    assert "DuplicateAssignment" in duplicate.json()["detail"]["validation_errors"]

    left = await app_client.post(
        f"/team-assignments/{first['id']}/leave",
        json={"left_date": "2024-06-01"},
        headers=HEADERS,
    )
    assert left.status_code == 200
    assert left.json()["is_active"] is False

    active = await app_client.get(f"/players/{player_id}/teams/active")
    assert active.json() == []
    history = await app_client.get(f"/players/{player_id}/teams?include_inactive=true")
    assert [a["id"] for a in history.json()] == [first["id"]]


@pytest.mark.asyncio
async def test_statistics_and_aggregates(app_client) -> None:
    player_id = await _create_player(app_client)
    assignment = await _create_assignment(app_client, player_id)

    empty = await app_client.get(f"/players/{player_id}/aggregates")
    assert empty.json()["game_count"] == 0
    assert empty.json()["average_goals"] == 0

    for game_date, goals in (("2024-02-01", 2), ("2024-02-08", 1)):
        response = await app_client.post(
            "/statistics",
            json={
                "team_assignment_id": assignment["id"],
                "game_date": game_date,
                "minutes_played": 90,
                "is_starter": True,
                "jersey_number": 9,
                "goals": goals,
                "assists": 1,
            },
            headers=HEADERS,
        )
        assert response.status_code == 201, response.text

    listed = await app_client.get(f"/players/{player_id}/statistics")
    assert [s["game_date"] for s in listed.json()] == ["2024-02-08", "2024-02-01"]
    assert listed.json()[0]["team_name"] == "Lions"

    ranged = await app_client.get(
        f"/players/{player_id}/statistics",
        params={"start_date": "2024-02-02", "end_date": "2024-02-28"},
    )
    assert len(ranged.json()) == 1

    aggregates = await app_client.get(
        f"/players/{player_id}/aggregates",
        params={"team_assignment_id": assignment["id"]},
    )
    body = aggregates.json()
    assert body["game_count"] == 2
    assert body["total_goals"] == 3
    assert body["average_goals"] == 1.5


@pytest.mark.asyncio
async def test_reversed_date_range_is_400(app_client) -> None:
    player_id = await _create_player(app_client)
    response = await app_client.get(
        f"/players/{player_id}/statistics",
        params={"start_date": "2024-03-01", "end_date": "2024-02-01"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_statistic(app_client) -> None:
    missing = await app_client.delete("/statistics/999")
    assert missing.status_code == 404
    assert "could not be found" in missing.json()["detail"]["error_messages"][0]

    player_id = await _create_player(app_client)
    assignment = await _create_assignment(app_client, player_id)
    created = await app_client.post(
        "/statistics",
        json={
            "team_assignment_id": assignment["id"],
            "game_date": "2024-02-01",
            "minutes_played": 30,
            "jersey_number": 4,
            "goals": 0,
            "assists": 0,
        },
        headers=HEADERS,
    )
    response = await app_client.delete(f"/statistics/{created.json()['id']}")
    assert response.status_code == 200
    assert response.json() is True


@pytest.mark.asyncio
async def test_delete_that_loses_a_race_is_409(app_client, statistic_repo, monkeypatch) -> None:
    player_id = await _create_player(app_client)
    assignment = await _create_assignment(app_client, player_id)
    created = await app_client.post(
        "/statistics",
        json={
            "team_assignment_id": assignment["id"],
            "game_date": "2024-02-01",
            "minutes_played": 30,
            "jersey_number": 4,
            "goals": 0,
            "assists": 0,
        },
        headers=HEADERS,
    )

    async def _nothing_deleted(game_statistic_id: int) -> bool:
        return False

    monkeypatch.setattr(statistic_repo, "delete", _nothing_deleted)
    response = await app_client.delete(f"/statistics/{created.json()['id']}")
    assert response.status_code == 409
    assert response.json()["detail"]["error_messages"] == [
        "Unable to delete statistic. Please try again."
    ]


@pytest.mark.asyncio
async def test_delete_player_cascades(app_client) -> None:
    player_id = await _create_player(app_client)
    assignment = await _create_assignment(app_client, player_id)
    assert (await app_client.delete(f"/players/{player_id}")).json() is True
    response = await app_client.get(f"/team-assignments/{assignment['id']}")
    assert response.status_code == 404
