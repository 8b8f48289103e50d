from __future__ import annotations

import pytest

from sudoku_match.board import CELLS, EMPTY, from_string
from sudoku_match.validator import (
    is_empty_cell,
    is_number_in_range,
    is_solved,
    is_valid_index,
    is_valid_move,
)


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


def _puzzle() -> list[int]:
    puzzle = list(SOLVED)
    puzzle[10] = EMPTY
    return puzzle


def test_primitives() -> None:
    assert is_valid_index(0) and is_valid_index(80)
    assert not is_valid_index(-1) and not is_valid_index(81)
    assert not is_valid_index(True)
    assert is_empty_cell(EMPTY) and not is_empty_cell(3)
    assert is_number_in_range(1) and is_number_in_range(9)
    assert not is_number_in_range(0) and not is_number_in_range(10)


def test_accepts_blank_cell_with_digit() -> None:
    assert is_valid_move(10, _puzzle(), 5)


@pytest.mark.parametrize("index", [-1, 81, 1000, "10", None])
def test_rejects_out_of_range_index(index) -> None:
    assert not is_valid_move(index, _puzzle(), 5)


def test_rejects_given_cell_even_with_correct_value() -> None:
    assert not is_valid_move(11, _puzzle(), SOLVED[11])


@pytest.mark.parametrize("value", [0, 10, -1, 2.5, True])
def test_rejects_value_out_of_range(value) -> None:
    assert not is_valid_move(10, _puzzle(), value)


def test_solved_board() -> None:
    assert is_solved(SOLVED)


def test_wrong_length_is_not_solved() -> None:
    assert not is_solved(SOLVED[:80])
    assert not is_solved(list(SOLVED) + [1])


def test_empty_or_out_of_range_cell_is_not_solved() -> None:
    for bad in (EMPTY, 0, 10):
        board = list(SOLVED)
        board[40] = bad
        assert not is_solved(board)


def test_duplicate_is_not_solved() -> None:
    board = list(SOLVED)
    board[0], board[1] = board[1], board[0]
    assert not is_solved(board)


def test_all_same_digit_is_not_solved() -> None:
    assert not is_solved([1] * CELLS)
