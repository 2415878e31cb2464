"""Tests for the FastAPI RemoteXO interface."""

from __future__ import annotations

import asyncio

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from conftest import FakeConnection
from remotexo.api import WS_GAME_NOT_FOUND, create_app
from remotexo.directory import MatchDirectory
from remotexo.rooms import RoomBroadcaster
from remotexo.store import InMemoryRecordStore


WINNING_MOVES = [(0, 0), (1, 1), (0, 1), (2, 2), (0, 2)]


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


def _move(client, game_id, row, col):
    return client.post(
        f"/api/game/{game_id}/move", json={"coords": {"row": row, "col": col}}
    )


def test_create_and_fetch_game(client):
    response = client.post("/api/game", json={"startingPlayer": "o"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["currentPlayer"] == "o"
    assert payload["endState"] is None
    assert payload["board"] == [[None, None, None]] * 3
    assert payload["name"]

    follow_up = client.get(f"/api/game/{payload['id']}")
    assert follow_up.status_code == 200
    assert follow_up.json() == payload


def test_starting_player_defaults_to_x(client):
    assert client.post("/api/game", json={}).json()["currentPlayer"] == "x"


def test_rejects_unknown_starting_player(client):
    response = client.post("/api/game", json={"startingPlayer": "z"})
    assert response.status_code == 422


def test_missing_game_returns_404(client):
    assert client.get("/api/game/INVALID").status_code == 404
    assert _move(client, "INVALID", 0, 0).status_code == 404


def test_move_updates_board(client):
    game_id = client.post("/api/game", json={"startingPlayer": "x"}).json()["id"]
    response = _move(client, game_id, 1, 1)
    assert response.status_code == 200
    state = response.json()
    assert state["board"][1][1] == "x"
    assert state["currentPlayer"] == "o"


def test_duplicate_move_is_ignored(client):
    game_id = client.post("/api/game", json={}).json()["id"]
    first = _move(client, game_id, 0, 0).json()
    duplicate = _move(client, game_id, 0, 0)
    assert duplicate.status_code == 200
    assert duplicate.json() == first


def test_out_of_range_move_is_rejected(client):
    game_id = client.post("/api/game", json={}).json()["id"]
    assert _move(client, game_id, 3, 0).status_code == 422


def test_finished_game_rejects_moves_and_suggestions(client):
    game_id = client.post("/api/game", json={}).json()["id"]
    for row, col in WINNING_MOVES:
        state = _move(client, game_id, row, col).json()
    assert state["endState"] == "x"
    assert state["currentPlayer"] == "o"

    late = _move(client, game_id, 2, 0)
    assert late.status_code == 409
    assert late.json()["detail"]
    assert client.get(f"/api/game/{game_id}/suggestion").status_code == 409


def test_lobby_lists_only_open_games(client):
    finished = client.post("/api/game", json={}).json()["id"]
    for row, col in WINNING_MOVES:
        _move(client, finished, row, col)
    open_game = client.post("/api/game", json={}).json()["id"]

    listed = {game["id"] for game in client.get("/api/games").json()}
    assert open_game in listed
    assert finished not in listed


def test_suggestion_completes_winning_line(client):
    game_id = client.post("/api/game", json={}).json()["id"]
    for row, col in [(0, 0), (1, 0), (0, 1), (1, 1)]:
        _move(client, game_id, row, col)
    response = client.get(f"/api/game/{game_id}/suggestion")
    assert response.status_code == 200
    assert response.json() == {"row": 0, "col": 2}


def test_viewer_receives_game_updates(client):
    game_id = client.post("/api/game", json={}).json()["id"]
    with client.websocket_connect(f"/ws/game/{game_id}") as websocket:
        assert websocket.receive_json()["type"] == "user-joined"
        _move(client, game_id, 2, 2)
        update = websocket.receive_json()
    assert update["type"] == "game-updated"
    assert update["game"]["id"] == game_id
    assert update["game"]["board"][2][2] == "x"


def test_viewer_of_missing_game_is_refused(client):
    with client.websocket_connect("/ws/game/missing") as websocket:
        message = websocket.receive_json()
        assert message["type"] == "error"
        with pytest.raises(WebSocketDisconnect) as info:
            websocket.receive_json()
    assert info.value.code == WS_GAME_NOT_FOUND


def test_suggestions_use_the_app_owned_advisor(client):
    game_id = client.post("/api/game", json={}).json()["id"]
    advisor = client.app.state.advisor
    assert advisor._cache == {}
    assert client.get(f"/api/game/{game_id}/suggestion").status_code == 200
    assert len(advisor._cache) == 1


def test_apps_sharing_a_directory_announce_each_move_once():
    directory = MatchDirectory(InMemoryRecordStore())
    broadcaster = RoomBroadcaster(directory)
    create_app(directory, broadcaster)
    create_app(directory, broadcaster)
    viewer = FakeConnection()

    async def scenario():
        match = await directory.create_match("x")
        await broadcaster.join(viewer, match.id)
        await directory.submit_move(match.id, (0, 0))
        await broadcaster.drain()

    asyncio.run(scenario())
    assert len(viewer.of_type("game-updated")) == 1
