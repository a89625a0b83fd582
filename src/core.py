# core.py
# This file holds the shared vocabulary of the engine: directions, progress
# states, the fault type and the N x N board of cells.

from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

Cell = Optional[int]  # None is an empty cell, otherwise a positive tile value
Position = Tuple[int, int]

EMPTY: Cell = None


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3

class DIRECTION(Enum):
    """Represents the possible move directions."""
    UP = 1
    DOWN = 2
    LEFT = 3
    RIGHT = 4


class EngineFault(RuntimeError):
    """
    An internal invariant of the engine was violated.

    Raised for out-of-range coordinates, a missing tile at a move source, or a
    malformed token sequence inside the line pipeline. These signal a bug in
    the engine itself, so nothing in the engine catches them.
    """


# --- Board ---

class Board:
    """
    Fixed-size square grid of cells, stored row-major.

    The coordinate space is owned by the engine; indices outside
    ``0 <= idx < dimension`` raise EngineFault instead of a recoverable error.
    """

    def __init__(self, dimension: int, initial: Cell = EMPTY):
        if not isinstance(dimension, int) or dimension < 2:
            raise ValueError("Board dimension must be an integer of at least 2.")
        _check_cell(initial)
        self.dimension = dimension
        self._cells: List[Cell] = [initial] * (dimension * dimension)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Board":
        """
        Builds a board from the list-of-lists representation (0 = empty).
        Args:
            rows (Sequence[Sequence[int]]): A square matrix of non-negative integers.
        Returns:
            Board: A new board holding the same tiles.
        Raises:
            ValueError: If the matrix is not square, smaller than 2x2, or holds
                        anything other than non-negative integers.
        """
        n = get_board_size(rows)
        if n < 2:
            raise ValueError("Board must be at least 2x2.")
        board = cls(n)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    raise ValueError(f"Invalid tile value {value!r} at ({r}, {c}).")
                board.set(r, c, value or EMPTY)
        return board

    def to_rows(self) -> List[List[int]]:
        """Returns the board as a list of lists, with 0 for empty cells."""
        n = self.dimension
        return [[self._cells[r * n + c] or 0 for c in range(n)] for r in range(n)]

    def _index(self, row: int, col: int) -> int:
        if not (0 <= row < self.dimension and 0 <= col < self.dimension):
            raise EngineFault(f"Coordinate ({row}, {col}) outside a {self.dimension}x{self.dimension} board.")
        return row * self.dimension + col

    def get(self, row: int, col: int) -> Cell:
        return self._cells[self._index(row, col)]

    def set(self, row: int, col: int, cell: Cell) -> None:
        _check_cell(cell)
        self._cells[self._index(row, col)] = cell

    def __getitem__(self, position: Position) -> Cell:
        return self.get(*position)

    def __setitem__(self, position: Position, cell: Cell) -> None:
        self.set(position[0], position[1], cell)

    def positions(self) -> Iterator[Position]:
        """Yields every coordinate in row-major order."""
        for r in range(self.dimension):
            for c in range(self.dimension):
                yield r, c

    def empty_positions(self) -> List[Position]:
        """
        Get coordinates of empty cells, scanning row by row.
        Returns:
            List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
        """
        return [pos for pos in self.positions() if self[pos] is EMPTY]

    def fill_all(self, cell: Cell) -> None:
        _check_cell(cell)
        self._cells = [cell] * (self.dimension * self.dimension)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.dimension == other.dimension and self._cells == other._cells

    def __repr__(self) -> str:
        return f"Board({self.to_rows()!r})"


def _check_cell(cell: Cell) -> None:
    if cell is not EMPTY and (isinstance(cell, bool) or not isinstance(cell, int) or cell <= 0):
        raise EngineFault(f"Tile values must be positive integers, got {cell!r}.")


# --- Board Helper Functions ---

def get_board_size(board: Sequence[Sequence[int]]) -> int:
    """
    Gets the size (N) of an N x N board.
    Args:
        board (Sequence[Sequence[int]]): The game board.
    Returns:
        int: The dimension of the board.
    Raises:
        ValueError: If the board is not square or empty.
    """
    if not board or not all(len(row) == len(board) for row in board):
        raise ValueError("Board must be a non-empty square matrix.")
    return len(board)
