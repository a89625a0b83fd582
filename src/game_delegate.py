# game_delegate.py
# Notification interface between the engine and whatever presents the board.

from dataclasses import dataclass
from typing import List, Optional

from core import Position


class GameDelegate:
    """
    Receives board mutations as they happen, synchronously, during a move.

    The engine holds exactly one delegate, set at construction, and never
    waits on it. Every method is a no-op here so implementations only need
    to override what they render.
    """

    def on_score_changed(self, score: int) -> None:
        pass

    def on_tile_moved(self, source: Position, destination: Position, value: int) -> None:
        pass

    def on_tiles_merged(self, first: Position, second: Position, destination: Position, value: int) -> None:
        pass

    def on_tile_inserted(self, position: Position, value: int) -> None:
        pass


@dataclass(frozen=True)
class TileEvent:
    kind: str  # "move", "merge" or "insert"
    destination: Position
    value: int
    source: Optional[Position] = None
    second_source: Optional[Position] = None


class RecordingDelegate(GameDelegate):
    """Keeps every tile notification in order, plus the last reported score."""

    def __init__(self) -> None:
        self.events: List[TileEvent] = []
        self.scores: List[int] = []

    def on_score_changed(self, score: int) -> None:
        self.scores.append(score)

    def on_tile_moved(self, source: Position, destination: Position, value: int) -> None:
        self.events.append(TileEvent("move", destination, value, source=source))

    def on_tiles_merged(self, first: Position, second: Position, destination: Position, value: int) -> None:
        self.events.append(TileEvent("merge", destination, value, source=first, second_source=second))

    def on_tile_inserted(self, position: Position, value: int) -> None:
        self.events.append(TileEvent("insert", position, value))

    def clear(self) -> None:
        self.events.clear()
        self.scores.clear()
