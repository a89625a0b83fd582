# line_pipeline.py
# Pure functions that turn one line of cells (ordered from the leading edge of
# the move) into move orders: condense -> collapse -> convert.

from dataclasses import dataclass
from typing import Callable, List, MutableSequence, Optional, Sequence, Tuple, Union

from core import EMPTY, Cell, EngineFault

# --- Action tokens (intermediate values, one line only) ---

@dataclass(frozen=True)
class NoAction:
    """Tile stays exactly where it started."""
    source: int
    value: int

@dataclass(frozen=True)
class Move:
    """Tile slides to a new index without merging."""
    source: int
    value: int

@dataclass(frozen=True)
class SingleCombine:
    """A moving tile slides into a stationary tile and merges with it."""
    source: int
    value: int

@dataclass(frozen=True)
class DoubleCombine:
    """Two moving tiles merge into a new position."""
    source: int
    second: int
    value: int

ActionToken = Union[NoAction, Move, SingleCombine, DoubleCombine]

# --- Move orders (pipeline output) ---

@dataclass(frozen=True)
class SingleMove:
    source: int
    destination: int
    value: int
    was_merge: bool

@dataclass(frozen=True)
class DoubleMove:
    first_source: int
    second_source: int
    destination: int
    value: int

MoveOrder = Union[SingleMove, DoubleMove]


# --- Pipeline stages ---

def condense(line: Sequence[Cell]) -> List[ActionToken]:
    """
    Strips empty cells from a line and tags each remaining tile.
    Args:
        line (Sequence[Cell]): Cells ordered from the leading edge of the move.
    Returns:
        List[ActionToken]: NoAction for tiles whose filtered position equals
                           their original index, Move for the rest.
    """
    tokens: List[ActionToken] = []
    for idx, cell in enumerate(line):
        if cell is EMPTY:
            continue
        if len(tokens) == idx:
            tokens.append(NoAction(source=idx, value=cell))
        else:
            tokens.append(Move(source=idx, value=cell))
    return tokens


def _still_quiescent(input_position: int, output_length: int, original_position: int) -> bool:
    # Nothing ahead of the tile was dropped or merged, so it can keep presenting as stationary.
    return input_position == output_length and original_position == input_position


def collapse(tokens: Sequence[ActionToken]) -> List[ActionToken]:
    """
    Merges adjacent equal-valued tokens in a single left-to-right pass.

    A tile that merged is never merged again in the same move. When the first
    tile of a pair is a quiescent NoAction the merge is a SingleCombine keyed
    by the incoming tile's source; otherwise both tiles slide into a
    DoubleCombine. Unmerged NoAction tokens that lost quiescence become Move.
    Args:
        tokens (Sequence[ActionToken]): Output of condense.
    Returns:
        List[ActionToken]: The collapsed token sequence; positions are destinations.
    Raises:
        EngineFault: If the input already contains combine tokens.
    """
    for token in tokens:
        if isinstance(token, (SingleCombine, DoubleCombine)):
            raise EngineFault(f"Cannot have combine token {token!r} in collapse input.")

    collapsed: List[ActionToken] = []
    skip_next = False
    for idx, token in enumerate(tokens):
        if skip_next:
            skip_next = False
            continue
        quiescent = isinstance(token, NoAction) and _still_quiescent(idx, len(collapsed), token.source)
        following = tokens[idx + 1] if idx + 1 < len(tokens) else None

        if following is not None and following.value == token.value:
            merged_value = token.value + following.value
            skip_next = True
            if quiescent:
                collapsed.append(SingleCombine(source=following.source, value=merged_value))
            else:
                collapsed.append(DoubleCombine(source=token.source, second=following.source, value=merged_value))
        elif isinstance(token, NoAction) and not quiescent:
            collapsed.append(Move(source=token.source, value=token.value))
        else:
            collapsed.append(token)
    return collapsed


def convert(tokens: Sequence[ActionToken]) -> List[MoveOrder]:
    """
    Turns collapsed tokens into move orders, using each token's position as
    its destination. NoAction tokens produce nothing.
    """
    orders: List[MoveOrder] = []
    for destination, token in enumerate(tokens):
        if isinstance(token, Move):
            orders.append(SingleMove(token.source, destination, token.value, was_merge=False))
        elif isinstance(token, SingleCombine):
            orders.append(SingleMove(token.source, destination, token.value, was_merge=True))
        elif isinstance(token, DoubleCombine):
            orders.append(DoubleMove(token.source, token.second, destination, token.value))
        elif not isinstance(token, NoAction):
            raise EngineFault(f"Unknown action token {token!r}.")
    return orders


def merge_line(line: Sequence[Cell]) -> List[MoveOrder]:
    """Runs the full pipeline on one line."""
    return convert(collapse(condense(line)))


# --- Applying orders ---

def apply_orders(
    line: MutableSequence[Cell],
    orders: Sequence[MoveOrder],
    on_applied: Optional[Callable[[MoveOrder], None]] = None,
) -> int:
    """
    Applies move orders to a line in place, clearing sources before writing
    each destination.
    Args:
        line (MutableSequence[Cell]): The line the orders were computed from.
        orders (Sequence[MoveOrder]): Output of merge_line for that line.
        on_applied (Callable[[MoveOrder], None]): Called after each order lands.
    Returns:
        int: The score gained from merges.
    Raises:
        EngineFault: If an order references an empty source cell.
    """
    score_increase = 0
    for order in orders:
        if isinstance(order, SingleMove):
            sources: Tuple[int, ...] = (order.source,)
            if order.was_merge:
                score_increase += order.value
        elif isinstance(order, DoubleMove):
            sources = (order.first_source, order.second_source)
            score_increase += order.value
        else:
            raise EngineFault(f"Unknown move order {order!r}.")
        for source in sources:
            if line[source] is EMPTY:
                raise EngineFault(f"Expected a tile at line index {source}.")
            line[source] = EMPTY
        line[order.destination] = order.value
        if on_applied is not None:
            on_applied(order)
    return score_increase
