"""Player and match records owned by a session."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .board import EMPTY, OCCUPIED

RESULT_WIN = "win"
RESULT_LOSE = "lose"


@dataclass(frozen=True)
class PlayerProfile:
    """Verified identity handed to the session on join."""

    player_id: int | str
    display_name: str
    avatar: str = ""

    @classmethod
    def from_auth(cls, auth: Mapping[str, Any]) -> "PlayerProfile":
        if "id" not in auth:
            raise ValueError("auth payload is missing 'id'")
        avatar = auth.get("avatar", "")
        if not isinstance(avatar, str):
            avatar = json.dumps(avatar, sort_keys=True)
        return cls(
            player_id=auth["id"],
            display_name=str(auth.get("profile_name") or auth["id"]),
            avatar=avatar,
        )


@dataclass
class PlayerProgress:
    """A player's boards.

    ``private_board`` holds the real digits and is only shown to its owner.
    ``public_board`` mirrors it with ``OCCUPIED`` in place of the player's own
    digits; every cell is filled in one board exactly when it is in the other.
    """

    profile: PlayerProfile
    private_board: List[int] = field(default_factory=list)
    public_board: List[int] = field(default_factory=list)

    def reset(self, puzzle: Sequence[int]) -> None:
        self.private_board = list(puzzle)
        self.public_board = list(puzzle)

    def place(self, index: int, value: int) -> None:
        self.private_board[index] = value
        self.public_board[index] = OCCUPIED

    def filled_cells(self) -> int:
        return sum(1 for v in self.private_board if v != EMPTY)


@dataclass(frozen=True)
class PlayerResult:
    player_id: int | str
    board: Tuple[int, ...]
    result: str


@dataclass(frozen=True)
class MatchRecord:
    """Final result reported to the match service."""

    winner: int | str
    end_time: int
    players: Tuple[PlayerResult, ...]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "winner": self.winner,
            "end_time": self.end_time,
            "players": [
                {"id": p.player_id, "board": list(p.board), "result": p.result}
                for p in self.players
            ],
        }


__all__ = [
    "RESULT_LOSE",
    "RESULT_WIN",
    "MatchRecord",
    "PlayerProfile",
    "PlayerProgress",
    "PlayerResult",
]
