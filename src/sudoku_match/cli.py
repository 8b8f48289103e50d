"""Diagnostic command line for the puzzle engine."""

from __future__ import annotations

import argparse
import json
import logging
from typing import List, Optional

from . import project_config
from .board import EMPTY, format_board, from_string, to_string
from .generator import PuzzleGenerator, cells_to_remove, count_solutions, solve
from .validator import is_solved


def _difficulty(text: str) -> float:
    try:
        value = float(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid difficulty {text!r}") from exc
    if not 0.0 <= value <= 1.0:
        raise argparse.ArgumentTypeError("difficulty must be within [0, 1]")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sudoku-match",
        description="Generate and check puzzles with the match engine.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        help="Logging level (defaults to the configured level).",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        help="TOML file to read instead of the packaged defaults.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate a puzzle with a unique solution.")
    generate.add_argument(
        "--difficulty",
        type=_difficulty,
        help="Difficulty between 0 and 1. Defaults to the configured difficulty.",
    )
    generate.add_argument("--solve", action="store_true", help="Also print the solution.")
    generate.add_argument("--json", action="store_true", help="Emit a JSON document instead of grids.")

    check = commands.add_parser("check", help="Check whether an 81-cell board is solved.")
    check.add_argument("board", help="81 characters, '.' or '0' for empty cells.")
    return parser


def _run_generate(args: argparse.Namespace, default_difficulty: float) -> int:
    difficulty = default_difficulty if args.difficulty is None else args.difficulty
    puzzle = PuzzleGenerator().generate(difficulty)
    cleared = sum(1 for v in puzzle if v == EMPTY)
    solution = solve(puzzle) if args.solve else None

    if args.json:
        document = {
            "difficulty": difficulty,
            "quota": cells_to_remove(difficulty),
            "cleared": cleared,
            "puzzle": to_string(puzzle),
            "unique": count_solutions(puzzle) == 1,
        }
        if solution is not None:
            document["solution"] = to_string(solution)
        print(json.dumps(document, indent=2))
        return 0

    print(format_board(puzzle))
    print(f"cleared {cleared} of {cells_to_remove(difficulty)} requested cells")
    if solution is not None:
        print()
        print(format_board(solution))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.config_path:
        project_config.reload(args.config_path)
    config = project_config.load_session_config()
    logging.basicConfig(level=(args.log_level or config.log_level).upper())

    if args.command == "generate":
        return _run_generate(args, config.difficulty)

    try:
        board = from_string(args.board)
    except ValueError as exc:
        parser.error(str(exc))
    if is_solved(board):
        print("solved")
        return 0
    print("not solved")
    return 1


__all__ = ["build_parser", "main"]


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
