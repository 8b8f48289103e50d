"""Move and solution checks used by the match session."""

from __future__ import annotations

from typing import Any, List, Set

from .board import CELLS, EMPTY, SIZE, Board, coordinates

__all__ = [
    "is_empty_cell",
    "is_number_in_range",
    "is_solved",
    "is_valid_index",
    "is_valid_move",
]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_valid_index(index: Any) -> bool:
    return _is_int(index) and 0 <= index < CELLS


def is_empty_cell(cell: int) -> bool:
    return cell == EMPTY


def is_number_in_range(value: Any) -> bool:
    return _is_int(value) and 1 <= value <= SIZE


def is_valid_move(index: Any, puzzle: Board, value: Any) -> bool:
    """Gate a fill request against the generated puzzle.

    Only cells left blank by the generator may be filled.  Row, column and box
    conflicts on the player's own board are not checked here; they surface when
    the player submits the board via :func:`is_solved`.
    """

    if not is_valid_index(index):
        return False
    return is_empty_cell(puzzle[index]) and is_number_in_range(value)


def is_solved(board: Board) -> bool:
    if len(board) != CELLS:
        return False

    rows: List[Set[int]] = [set() for _ in range(SIZE)]
    cols: List[Set[int]] = [set() for _ in range(SIZE)]
    boxes: List[Set[int]] = [set() for _ in range(SIZE)]

    for idx, value in enumerate(board):
        if not is_number_in_range(value):
            return False
        row, col, box = coordinates(idx)
        if value in rows[row] or value in cols[col] or value in boxes[box]:
            return False
        rows[row].add(value)
        cols[col].add(value)
        boxes[box].add(value)
    return True
