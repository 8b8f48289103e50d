# generator.py
# Generate a full random solution, then clear cells while the puzzle keeps a
# unique solution.  The solution counter doubles as the solver.

from __future__ import annotations

import logging
import math
import random
from typing import List, Optional, Set, Tuple

from .board import CELLS, EMPTY, SIZE, Board, coordinates, peers

__all__ = [
    "DIGITS",
    "PuzzleGenerator",
    "cells_to_remove",
    "count_solutions",
    "generate",
    "is_valid_placement",
    "solve",
]

_LOGGER = logging.getLogger(__name__)

DIGITS = tuple(range(1, SIZE + 1))
MIN_REMOVED = 25
REMOVAL_SPAN = 30


def cells_to_remove(difficulty: float) -> int:
    """Return the nominal number of cleared cells for ``difficulty`` in [0, 1]."""

    if not 0.0 <= difficulty <= 1.0:
        raise ValueError(f"difficulty must be within [0, 1], got {difficulty!r}")
    return math.floor(MIN_REMOVED + difficulty * REMOVAL_SPAN)


def is_valid_placement(board: Board, idx: int, value: int) -> bool:
    """``True`` when ``value`` does not repeat in the row, column or box of ``idx``."""

    return all(board[p] != value for p in peers(idx))


def _check_length(board: Board) -> None:
    if len(board) != CELLS:
        raise ValueError(f"board must contain {CELLS} cells, got {len(board)}")


# ---------- Backtracking search (count up to limit) ----------

def _search(board: Board, limit: int) -> Tuple[int, Optional[List[int]]]:
    grid = list(board)
    rows_used: List[Set[int]] = [set() for _ in range(SIZE)]
    cols_used: List[Set[int]] = [set() for _ in range(SIZE)]
    boxes_used: List[Set[int]] = [set() for _ in range(SIZE)]

    empties: List[int] = []
    for idx, v in enumerate(grid):
        if v == EMPTY:
            empties.append(idx)
            continue
        r, c, b = coordinates(idx)
        if v not in DIGITS or v in rows_used[r] or v in cols_used[c] or v in boxes_used[b]:
            # contradictory givens
            return 0, None
        rows_used[r].add(v)
        cols_used[c].add(v)
        boxes_used[b].add(v)

    def candidates(idx: int) -> List[int]:
        r, c, b = coordinates(idx)
        used = rows_used[r] | cols_used[c] | boxes_used[b]
        return [d for d in DIGITS if d not in used]

    solutions = 0
    first: Optional[List[int]] = None

    def backtrack(depth: int) -> bool:
        nonlocal solutions, first
        if depth == len(empties):
            solutions += 1
            if first is None:
                first = grid[:]
            return solutions >= limit

        # most constrained remaining cell first
        best, best_cand = depth, None
        for k in range(depth, len(empties)):
            cand = candidates(empties[k])
            if best_cand is None or len(cand) < len(best_cand):
                best, best_cand = k, cand
                if len(cand) <= 1:
                    break
        empties[depth], empties[best] = empties[best], empties[depth]
        idx = empties[depth]
        r, c, b = coordinates(idx)

        for d in best_cand or ():
            grid[idx] = d
            rows_used[r].add(d); cols_used[c].add(d); boxes_used[b].add(d)
            stop = backtrack(depth + 1)
            rows_used[r].remove(d); cols_used[c].remove(d); boxes_used[b].remove(d)
            grid[idx] = EMPTY
            if stop:
                return True
        return False

    backtrack(0)
    return solutions, first


def count_solutions(board: Board, limit: int = 2) -> int:
    """Count completions of ``board``, stopping as soon as ``limit`` are found."""

    _check_length(board)
    count, _ = _search(board, limit)
    return count


def solve(board: Board) -> Optional[List[int]]:
    """Return the first full solution found for ``board`` or ``None``."""

    _check_length(board)
    _, solution = _search(board, 1)
    return solution


# ---------- Generator ----------

class PuzzleGenerator:
    """Randomised puzzle generator with a uniqueness guarantee.

    Every call draws from ``rng``; the default is an unseeded
    :class:`random.Random`, so two generators never share a sequence.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def fill_solution(self) -> List[int]:
        board = [EMPTY] * CELLS
        if not self._fill(board, 0):  # pragma: no cover - an empty grid always fills
            raise RuntimeError("failed to fill an empty board")
        return board

    def _fill(self, board: List[int], idx: int) -> bool:
        if idx >= CELLS:
            return True
        if board[idx] != EMPTY:
            return self._fill(board, idx + 1)

        candidates = list(DIGITS)
        self._rng.shuffle(candidates)
        for d in candidates:
            if is_valid_placement(board, idx, d):
                board[idx] = d
                if self._fill(board, idx + 1):
                    return True
                board[idx] = EMPTY
        return False

    def generate(self, difficulty: float = 0.5) -> Tuple[int, ...]:
        """Return a puzzle whose only completion is the generated solution.

        The removal quota is ``floor(25 + 30 * difficulty)``.  Cells whose
        removal would admit a second solution are restored, so the quota is
        an upper bound rather than a guarantee.
        """

        quota = cells_to_remove(difficulty)
        puzzle = self.fill_solution()

        order = list(range(CELLS))
        self._rng.shuffle(order)

        removed = 0
        for idx in order:
            if removed >= quota:
                break
            saved = puzzle[idx]
            puzzle[idx] = EMPTY
            if count_solutions(puzzle) == 1:
                removed += 1
            else:
                puzzle[idx] = saved

        _LOGGER.debug("generated puzzle: difficulty=%s quota=%d removed=%d", difficulty, quota, removed)
        return tuple(puzzle)


def generate(difficulty: float = 0.5) -> Tuple[int, ...]:
    return PuzzleGenerator().generate(difficulty)
