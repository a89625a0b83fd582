from __future__ import annotations

import asyncio

import pytest

import cli_driver
from conftest import ScriptedRng
from core import GameProgressState
from game_model import GameModel


def test_play_applies_moves_until_quit(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    keys = iter(["x", "a", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(keys))
    model = GameModel(2, 2048, rng=ScriptedRng())

    progress = asyncio.run(cli_driver.play(model))

    assert progress == GameProgressState.IN_PROGRESS
    assert model.board.to_rows() == [[0, 0], [4, 2]]
    assert model.score == 4
    out = capsys.readouterr().out
    assert "Invalid input. Use W, A, S, D." in out
    assert "Quitting game." in out


def test_play_stops_when_the_game_is_won(monkeypatch: pytest.MonkeyPatch) -> None:
    keys = iter(["d"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(keys))
    model = GameModel(2, 4, rng=ScriptedRng())

    assert asyncio.run(cli_driver.play(model)) == GameProgressState.GAME_WON
