# move_executor.py
# Applies the line pipeline to every line of a board for one direction.

import logging
from typing import Callable, List

from core import DIRECTION, Board, Cell, Position
from game_delegate import GameDelegate
from line_pipeline import MoveOrder, SingleMove, apply_orders, merge_line

logger = logging.getLogger(__name__)


def line_coordinates(direction: DIRECTION, iteration: int, dimension: int) -> List[Position]:
    """
    Maps the 1-D indices of one line to board coordinates.
    Args:
        direction (DIRECTION): The direction tiles travel.
        iteration (int): Which column (UP/DOWN) or row (LEFT/RIGHT) to walk.
        dimension (int): The board size N.
    Returns:
        List[Tuple[int, int]]: Coordinates ordered from the leading edge of the move.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    if direction == DIRECTION.UP:
        return [(i, iteration) for i in range(dimension)]
    if direction == DIRECTION.DOWN:
        return [(dimension - i - 1, iteration) for i in range(dimension)]
    if direction == DIRECTION.LEFT:
        return [(iteration, i) for i in range(dimension)]
    if direction == DIRECTION.RIGHT:
        return [(iteration, dimension - i - 1) for i in range(dimension)]
    raise ValueError("Invalid direction specified for line_coordinates.")


class _BoardLine:
    """One line of the board addressed by its 1-D index; writes go straight to the board."""

    def __init__(self, board: Board, coords: List[Position]):
        self.board = board
        self.coords = coords

    def __len__(self) -> int:
        return len(self.coords)

    def __getitem__(self, idx: int) -> Cell:
        return self.board[self.coords[idx]]

    def __setitem__(self, idx: int, cell: Cell) -> None:
        self.board[self.coords[idx]] = cell

    def cells(self) -> List[Cell]:
        return [self.board[c] for c in self.coords]


def execute_move(
    board: Board,
    direction: DIRECTION,
    delegate: GameDelegate,
    on_merge: Callable[[int], None],
) -> bool:
    """
    Slides and merges every line of the board in place.
    Args:
        board (Board): The board to mutate.
        direction (DIRECTION): The direction to move.
        delegate (GameDelegate): Notified once per applied move order.
        on_merge (Callable[[int], None]): Called with the merged value of every combine.
    Returns:
        bool: True if at least one tile changed position.
    """
    at_least_one_move = False
    for iteration in range(board.dimension):
        coords = line_coordinates(direction, iteration, board.dimension)
        line = _BoardLine(board, coords)
        orders = merge_line(line.cells())
        if not orders:
            continue
        at_least_one_move = True

        def notify(order: MoveOrder) -> None:
            destination = coords[order.destination]
            if isinstance(order, SingleMove):
                if order.was_merge:
                    on_merge(order.value)
                delegate.on_tile_moved(coords[order.source], destination, order.value)
            else:
                on_merge(order.value)
                delegate.on_tiles_merged(
                    coords[order.first_source], coords[order.second_source], destination, order.value
                )

        apply_orders(line, orders, notify)

    logger.debug("Move %s changed board: %s", direction.name, at_least_one_move)
    return at_least_one_move
