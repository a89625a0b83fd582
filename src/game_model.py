# game_model.py
# Game rules around the board: score, tile insertion, win/loss and the move queue.

import logging
import random
from typing import Optional, Sequence, Tuple

from command_queue import CommandQueue, Completion, Scheduler
from core import DIRECTION, EMPTY, Board, GameProgressState, Position
from game_delegate import GameDelegate
from move_executor import execute_move
from settings import EngineSettings

logger = logging.getLogger(__name__)

STARTING_TILE = 2


class GameModel:
    """
    One game instance: board, score and the queue that paces moves.

    All methods expect to be called from a single thread of control; the
    queue's timer callback is the only other entry point into move processing.
    """

    def __init__(
        self,
        dimension: int,
        threshold: int,
        delegate: Optional[GameDelegate] = None,
        scheduler: Optional[Scheduler] = None,
        queue_capacity: int = 100,
        queue_delay: float = 0.3,
        rng: Optional[random.Random] = None,
    ):
        if not isinstance(threshold, int) or threshold <= 0:
            raise ValueError("Win threshold must be a positive integer.")
        self.dimension = dimension
        self.threshold = threshold
        self.delegate = delegate if delegate is not None else GameDelegate()
        self.board = Board(dimension)
        self.queue = CommandQueue(self.perform_move, scheduler, capacity=queue_capacity, delay=queue_delay)
        self._rng = rng if rng is not None else random.Random()
        self._score = 0

    @classmethod
    def from_settings(cls, settings: EngineSettings, **kwargs) -> "GameModel":
        return cls(
            settings.size,
            settings.win_tile,
            queue_capacity=settings.queue_capacity,
            queue_delay=settings.queue_delay,
            **kwargs,
        )

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], threshold: int, score: int = 0, **kwargs) -> "GameModel":
        """
        Builds a model over an existing board (0 = empty) and score.
        Raises:
            ValueError: If the board, threshold or score are invalid.
        """
        if score < 0:
            raise ValueError("Score cannot be negative.")
        board = Board.from_rows(rows)
        model = cls(board.dimension, threshold, **kwargs)
        model.board = board
        model._score = score
        return model

    @property
    def score(self) -> int:
        return self._score

    @score.setter
    def score(self, value: int) -> None:
        self._score = value
        self.delegate.on_score_changed(value)

    def _add_to_score(self, value: int) -> None:
        self.score += value

    # --- Lifecycle ---

    def reset(self) -> None:
        """Clears board and score, and abandons queued moves and any pending timer."""
        self.score = 0
        self.board.fill_all(EMPTY)
        self.queue.clear()

    def new_game(self) -> None:
        self.reset()
        self.insert_tile_at_random_location(STARTING_TILE)
        self.insert_tile_at_random_location(STARTING_TILE)

    # --- Moves ---

    def perform_move(self, direction: DIRECTION) -> bool:
        """
        Slides the whole board in one direction right away.
        Returns:
            bool: True if any tile moved or merged.
        """
        return execute_move(self.board, direction, self.delegate, self._add_to_score)

    def queue_move(self, direction: DIRECTION, completion: Completion) -> None:
        """Submits a move to the command queue; completion receives whether the board changed."""
        self.queue.enqueue(direction, completion)

    def follow_up(self) -> GameProgressState:
        """
        Post-move policy after a move that changed the board: a won game gets
        no new tile, otherwise a random tile is inserted and loss is checked.
        """
        won, _ = self.user_has_won()
        if won:
            return GameProgressState.GAME_WON
        self.insert_random_tile()
        if self.user_has_lost():
            return GameProgressState.GAME_OVER
        return GameProgressState.IN_PROGRESS

    # --- Tile insertion ---

    def insert_tile(self, position: Position, value: int) -> None:
        """Writes a tile into an empty cell and notifies; occupied cells are left alone."""
        if self.board[position] is not EMPTY:
            return
        self.board[position] = value
        self.delegate.on_tile_inserted(position, value)

    def insert_tile_at_random_location(self, value: int) -> None:
        open_spots = self.board.empty_positions()
        if not open_spots:
            logger.debug("No empty cell for a %d tile", value)
            return
        self.insert_tile(self._rng.choice(open_spots), value)

    def insert_random_tile(self) -> None:
        """Adds a 2 (90%) or a 4 (10%) at a random empty cell."""
        self.insert_tile_at_random_location(4 if self._rng.random() < 0.1 else 2)

    # --- Game State Checks ---

    def _tile_below_has_same_value(self, position: Position, value: int) -> bool:
        row, col = position
        if row == self.dimension - 1:
            return False
        return self.board[row + 1, col] == value

    def _tile_to_right_has_same_value(self, position: Position, value: int) -> bool:
        row, col = position
        if col == self.dimension - 1:
            return False
        return self.board[row, col + 1] == value

    def user_has_lost(self) -> bool:
        """
        Check if no move is left: the board is full and no tile has an equal
        neighbour below it or to its right.
        """
        if self.board.empty_positions():
            return False
        for position in self.board.positions():
            value = self.board[position]
            if self._tile_below_has_same_value(position, value) or self._tile_to_right_has_same_value(position, value):
                return False
        return True

    def user_has_won(self) -> Tuple[bool, Optional[Position]]:
        """
        Check if any tile reached the threshold.
        Returns:
            Tuple[bool, Optional[Tuple[int, int]]]: Whether the game is won and
                the first winning position in row-major order.
        """
        for position in self.board.positions():
            value = self.board[position]
            if value is not EMPTY and value >= self.threshold:
                return True, position
        return False, None

    def progress(self) -> GameProgressState:
        """Determines the current progress state of the game based on the board."""
        won, _ = self.user_has_won()
        if won:
            return GameProgressState.GAME_WON
        if self.user_has_lost():
            return GameProgressState.GAME_OVER
        return GameProgressState.IN_PROGRESS
