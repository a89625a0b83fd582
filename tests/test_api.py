from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api import app, limiter
from core import DIRECTION, EngineFault, GameProgressState
from game_model import GameModel


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    limiter.reset()
    with TestClient(app) as c:
        yield c


def test_new_game_has_two_starting_tiles(client: TestClient) -> None:
    resp = client.post("/game/new", json={"size": 5, "win_tile": 64})
    assert resp.status_code == 200
    data = resp.json()

    assert data["board_size"] == 5
    assert len(data["board"]) == 5
    assert sorted(v for row in data["board"] for v in row if v) == [2, 2]
    assert data["score"] == 0
    assert data["win_tile"] == 64
    assert data["progress"] == GameProgressState.IN_PROGRESS.value


def test_new_game_defaults(client: TestClient) -> None:
    resp = client.post("/game/new", json={})
    assert resp.status_code == 200
    assert resp.json()["board_size"] == 4
    assert resp.json()["win_tile"] == 2048


def test_new_game_rejects_tiny_board(client: TestClient) -> None:
    resp = client.post("/game/new", json={"size": 1})
    assert resp.status_code == 422


def test_move_merges_and_adds_a_tile(client: TestClient) -> None:
    board = [[2, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
    resp = client.post(
        "/game/move",
        json={"board": board, "score": 8, "direction": DIRECTION.LEFT.value, "win_tile": 2048},
    )
    assert resp.status_code == 200
    data = resp.json()

    assert data["move_was_effective"] is True
    assert data["score"] == 12
    assert data["board"][0][0] == 4
    assert data["progress"] == GameProgressState.IN_PROGRESS.value
    assert data["message"] is None

    events = data["events"]
    assert events[0] == {
        "kind": "move",
        "destination": [0, 0],
        "value": 4,
        "source": [0, 1],
        "second_source": None,
    }
    assert [e["kind"] for e in events] == ["move", "insert"]
    inserted = events[1]
    r, c = inserted["destination"]
    assert data["board"][r][c] == inserted["value"] in (2, 4)
    assert sum(1 for row in data["board"] for v in row if v) == 2


def test_double_merge_event(client: TestClient) -> None:
    board = [[0, 2, 2], [0, 0, 0], [0, 0, 0]]
    resp = client.post(
        "/game/move",
        json={"board": board, "score": 0, "direction": DIRECTION.LEFT.value, "win_tile": 2048},
    )
    data = resp.json()
    assert data["events"][0] == {
        "kind": "merge",
        "destination": [0, 0],
        "value": 4,
        "source": [0, 1],
        "second_source": [0, 2],
    }


def test_ineffective_move_on_blocked_board(client: TestClient) -> None:
    board = [[2, 4], [4, 2]]
    resp = client.post(
        "/game/move",
        json={"board": board, "score": 0, "direction": DIRECTION.UP.value, "win_tile": 2048},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["move_was_effective"] is False
    assert data["board"] == board
    assert data["events"] == []
    assert data["progress"] == GameProgressState.GAME_OVER.value
    assert data["message"] == "Game Over. No more valid moves."


def test_winning_move_skips_new_tile(client: TestClient) -> None:
    board = [[1024, 1024, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
    resp = client.post(
        "/game/move",
        json={"board": board, "score": 0, "direction": DIRECTION.RIGHT.value, "win_tile": 2048},
    )
    data = resp.json()
    assert data["progress"] == GameProgressState.GAME_WON.value
    assert data["message"] == "Congratulations! You won!"
    assert data["board"][0] == [0, 0, 0, 2048]
    assert sum(1 for row in data["board"] for v in row if v) == 1
    assert data["score"] == 2048


@pytest.mark.parametrize(
    "board",
    [
        [[2, 0], [0]],
        [[2, -2], [0, 0]],
        [[2]],
    ],
)
def test_invalid_boards_are_rejected(client: TestClient, board: list) -> None:
    resp = client.post(
        "/game/move",
        json={"board": board, "score": 0, "direction": DIRECTION.UP.value, "win_tile": 2048},
    )
    assert resp.status_code == 400
    assert "Invalid board structure" in resp.json()["detail"]


def test_engine_fault_is_logged_as_internal_error(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def _broken_move(self, direction):  # type: ignore[no-untyped-def]
        raise EngineFault("Expected a tile at (0, 1) while executing a move.")

    monkeypatch.setattr(GameModel, "perform_move", _broken_move)
    with caplog.at_level(logging.CRITICAL, logger="api"):
        resp = client.post(
            "/game/move",
            json={"board": [[2, 2], [0, 0]], "score": 0, "direction": DIRECTION.LEFT.value, "win_tile": 2048},
        )

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Internal engine error while processing the move."
    assert any(r.levelno == logging.CRITICAL and "Engine fault" in r.getMessage() for r in caplog.records)
