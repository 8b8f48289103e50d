"""Two-player competitive Sudoku match core."""

from __future__ import annotations

from .errors import (
    ContractViolation,
    InvalidMessage,
    MatchServiceError,
    SessionLockedError,
    SudokuMatchError,
)
from .generator import PuzzleGenerator, count_solutions, generate, is_valid_placement, solve
from .match_service import MatchService, MatchServiceClient
from .messages import MessageKind, ServerMessage
from .project_config import ServiceConfig, SessionConfig, load_session_config
from .records import MatchRecord, PlayerProfile, PlayerProgress, PlayerResult
from .session import GamePhase, SudokuSession
from .transport import InMemoryTransport, Transport
from .validator import is_solved, is_valid_move

__all__ = [
    "ContractViolation",
    "GamePhase",
    "InMemoryTransport",
    "InvalidMessage",
    "MatchRecord",
    "MatchService",
    "MatchServiceClient",
    "MatchServiceError",
    "MessageKind",
    "PlayerProfile",
    "PlayerProgress",
    "PlayerResult",
    "PuzzleGenerator",
    "ServerMessage",
    "ServiceConfig",
    "SessionConfig",
    "SessionLockedError",
    "SudokuMatchError",
    "SudokuSession",
    "Transport",
    "count_solutions",
    "generate",
    "is_solved",
    "is_valid_move",
    "is_valid_placement",
    "load_session_config",
    "solve",
]
