from __future__ import annotations

from typing import Any, Sequence

import pytest

from command_queue import VirtualClock
from game_delegate import RecordingDelegate
from game_model import GameModel


class ScriptedRng:
    """Stand-in for random.Random: always picks the last candidate and returns a fixed roll."""

    def __init__(self, roll: float = 0.5) -> None:
        self.roll = roll

    def choice(self, seq: Sequence[Any]) -> Any:
        return seq[-1]

    def random(self) -> float:
        return self.roll


@pytest.fixture()
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture()
def recorder() -> RecordingDelegate:
    return RecordingDelegate()


@pytest.fixture()
def make_model(clock: VirtualClock, recorder: RecordingDelegate):
    """Builds a model over the given rows wired to the shared clock and recorder."""

    def _make(rows: Sequence[Sequence[int]], threshold: int = 2048, **kwargs: Any) -> GameModel:
        kwargs.setdefault("delegate", recorder)
        kwargs.setdefault("scheduler", clock)
        return GameModel.from_rows(rows, threshold, **kwargs)

    return _make
