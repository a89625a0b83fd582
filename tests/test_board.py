from __future__ import annotations

import pytest

from core import EMPTY, Board, EngineFault


def test_rows_round_trip_maps_zero_to_empty() -> None:
    rows = [[0, 2, 0], [4, 0, 0], [0, 0, 8]]
    board = Board.from_rows(rows)

    assert board.dimension == 3
    assert board.get(0, 0) is EMPTY
    assert board.get(1, 0) == 4
    assert board[2, 2] == 8
    assert board.to_rows() == rows


def test_empty_positions_are_row_major() -> None:
    board = Board.from_rows([[2, 0], [0, 0]])
    assert board.empty_positions() == [(0, 1), (1, 0), (1, 1)]


def test_fill_all() -> None:
    board = Board.from_rows([[2, 4], [8, 16]])
    board.fill_all(EMPTY)
    assert board.to_rows() == [[0, 0], [0, 0]]
    assert len(board.empty_positions()) == 4


@pytest.mark.parametrize("row, col", [(-1, 0), (0, -1), (2, 0), (0, 2)])
def test_out_of_range_coordinates_fail_fast(row: int, col: int) -> None:
    board = Board(2)
    with pytest.raises(EngineFault):
        board.get(row, col)
    with pytest.raises(EngineFault):
        board.set(row, col, 2)


@pytest.mark.parametrize("value", [0, -2, True])
def test_non_positive_tiles_are_rejected(value: object) -> None:
    board = Board(2)
    with pytest.raises(EngineFault):
        board.set(0, 0, value)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "rows",
    [
        [],
        [[2]],
        [[2, 0], [0]],
        [[2, -4], [0, 0]],
        [[2, 0.5], [0, 0]],
    ],
)
def test_from_rows_rejects_bad_boards(rows: list) -> None:
    with pytest.raises(ValueError):
        Board.from_rows(rows)


def test_dimension_must_be_at_least_two() -> None:
    with pytest.raises(ValueError):
        Board(1)
