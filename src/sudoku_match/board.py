"""Flat 81-cell board representation and coordinate helpers.

Boards are plain sequences of 81 integers in row-major order.  ``EMPTY`` marks
an unfilled cell; ``OCCUPIED`` is only ever written to public boards, where it
hides the digit a player actually placed.

The coordinate helpers do not range-check their arguments: indices must be in
``[0, 80]`` and rows/columns in ``[0, 8]``.  All callers are internal.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, NamedTuple, Sequence, Tuple

__all__ = [
    "BOX",
    "CELLS",
    "EMPTY",
    "OCCUPIED",
    "SIZE",
    "Board",
    "Coordinates",
    "coordinates",
    "empty_board",
    "format_board",
    "from_string",
    "index",
    "peers",
    "to_string",
]

EMPTY = -1
OCCUPIED = -2
SIZE = 9
BOX = 3
CELLS = SIZE * SIZE

Board = Sequence[int]


class Coordinates(NamedTuple):
    row: int
    col: int
    box: int


def index(row: int, col: int) -> int:
    return row * SIZE + col


def coordinates(idx: int) -> Coordinates:
    row, col = divmod(idx, SIZE)
    return Coordinates(row, col, (row // BOX) * BOX + col // BOX)


@lru_cache(maxsize=CELLS)
def peers(idx: int) -> Tuple[int, ...]:
    """Return the 20 cells sharing a row, column or box with ``idx``."""

    row, col, _ = coordinates(idx)
    found = set()
    for k in range(SIZE):
        found.add(index(row, k))
        found.add(index(k, col))
    top, left = (row // BOX) * BOX, (col // BOX) * BOX
    for r in range(top, top + BOX):
        for c in range(left, left + BOX):
            found.add(index(r, c))
    found.discard(idx)
    return tuple(sorted(found))


def empty_board() -> List[int]:
    return [EMPTY] * CELLS


def to_string(board: Board) -> str:
    return "".join(str(v) if 1 <= v <= SIZE else "." for v in board)


def from_string(text: str) -> List[int]:
    """Parse an 81-character board; ``.`` and ``0`` denote empty cells."""

    compact = "".join(text.split())
    if len(compact) != CELLS:
        raise ValueError(f"board must contain {CELLS} cells, got {len(compact)}")
    board: List[int] = []
    for pos, ch in enumerate(compact):
        if ch in ".0":
            board.append(EMPTY)
        elif ch.isdigit():
            board.append(int(ch))
        else:
            raise ValueError(f"unexpected character {ch!r} at position {pos}")
    return board


def format_board(board: Board) -> str:
    lines = []
    for r in range(SIZE):
        if r % BOX == 0:
            lines.append("+-------+-------+-------+")
        row = []
        for c in range(SIZE):
            v = board[index(r, c)]
            row.append(str(v) if 1 <= v <= SIZE else ".")
            if c % BOX == BOX - 1:
                row.append("|")
        lines.append("| " + " ".join(row[:-1]) + " |")
    lines.append("+-------+-------+-------+")
    return "\n".join(lines)
