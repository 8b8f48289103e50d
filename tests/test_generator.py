from __future__ import annotations

import random

import pytest

from sudoku_match.board import CELLS, EMPTY, from_string
from sudoku_match.generator import (
    PuzzleGenerator,
    cells_to_remove,
    count_solutions,
    is_valid_placement,
    solve,
)
from sudoku_match.validator import is_solved


SOLVED = from_string(
    "123456789"
    "456789123"
    "789123456"
    "214365897"
    "365897214"
    "897214365"
    "531642978"
    "642978531"
    "978531642"
)


def test_removal_quota_bounds() -> None:
    assert cells_to_remove(0.0) == 25
    assert cells_to_remove(0.5) == 40
    assert cells_to_remove(1.0) == 55


def test_removal_quota_is_non_decreasing() -> None:
    steps = [i / 100 for i in range(101)]
    quotas = [cells_to_remove(d) for d in steps]
    assert quotas == sorted(quotas)


@pytest.mark.parametrize("difficulty", [-0.1, 1.01])
def test_removal_quota_rejects_out_of_range(difficulty: float) -> None:
    with pytest.raises(ValueError):
        cells_to_remove(difficulty)


def test_placement_checks_row_column_and_box() -> None:
    grid = [EMPTY] * CELLS
    grid[0] = 5
    assert not is_valid_placement(grid, 8, 5)   # same row
    assert not is_valid_placement(grid, 72, 5)  # same column
    assert not is_valid_placement(grid, 20, 5)  # same box
    assert is_valid_placement(grid, 40, 5)
    assert is_valid_placement(grid, 8, 6)


def test_fill_solution_is_a_valid_grid() -> None:
    solution = PuzzleGenerator().fill_solution()
    assert is_solved(solution)


def test_counter_stops_at_limit() -> None:
    empty = [EMPTY] * CELLS
    assert count_solutions(empty) == 2
    assert count_solutions(empty, limit=5) == 5


def test_solved_grid_has_exactly_one_solution() -> None:
    assert count_solutions(SOLVED) == 1
    assert solve(SOLVED) == SOLVED


def test_contradictory_givens_have_no_solution() -> None:
    grid = [EMPTY] * CELLS
    grid[0] = 4
    grid[1] = 4
    assert count_solutions(grid) == 0
    assert solve(grid) is None


def test_solver_rejects_wrong_length() -> None:
    with pytest.raises(ValueError):
        solve([EMPTY] * 80)
    with pytest.raises(ValueError):
        count_solutions([EMPTY] * 82)


@pytest.mark.parametrize("difficulty", [0.0, 0.5, 1.0])
def test_generated_puzzle_has_a_unique_completion(difficulty: float) -> None:
    puzzle = PuzzleGenerator().generate(difficulty)

    assert isinstance(puzzle, tuple)
    assert len(puzzle) == CELLS
    assert all(v == EMPTY or 1 <= v <= 9 for v in puzzle)

    cleared = sum(1 for v in puzzle if v == EMPTY)
    assert 0 < cleared <= cells_to_remove(difficulty)

    assert count_solutions(puzzle) == 1
    solution = solve(puzzle)
    assert solution is not None and is_solved(solution)
    for idx, value in enumerate(puzzle):
        if value != EMPTY:
            assert solution[idx] == value
        assert is_valid_placement(solution, idx, solution[idx])


def test_injected_rng_makes_generation_reproducible() -> None:
    first = PuzzleGenerator(random.Random(7)).generate(0.3)
    second = PuzzleGenerator(random.Random(7)).generate(0.3)
    assert first == second


def test_generation_differs_between_unseeded_runs() -> None:
    puzzles = {PuzzleGenerator().generate(0.0) for _ in range(3)}
    assert len(puzzles) > 1
