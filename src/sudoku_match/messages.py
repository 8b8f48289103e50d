"""Inbound and outbound message types exchanged with match clients."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union

from . import contracts
from .errors import ContractViolation, InvalidMessage

__all__ = [
    "NOT_RUNNING",
    "SERVER_ERROR",
    "CompleteRequest",
    "FillRequest",
    "InboundMessage",
    "MessageKind",
    "ServerMessage",
    "parse_message",
]

NOT_RUNNING = "Game is not running."
SERVER_ERROR = "Internal server error."


class MessageKind(enum.StrEnum):
    """Messages a client may send to its session."""

    FILL = "fill"
    COMPLETE = "complete"


class ServerMessage(enum.StrEnum):
    """Messages the session sends to clients."""

    PLAYER_MOVED = "player_moved"
    INVALID_MOVE = "invalid_move"
    COMPLETED = "completed"
    MATCH_STARTED = "match_started"
    MATCH_CANCELED = "match_canceled"
    ERROR = "error"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True)
class FillRequest:
    index: int
    num: int

    kind = MessageKind.FILL


@dataclass(frozen=True)
class CompleteRequest:
    kind = MessageKind.COMPLETE


InboundMessage = Union[FillRequest, CompleteRequest]


def parse_message(kind: str, payload: Any) -> InboundMessage:
    """Turn a raw ``(kind, payload)`` pair into a typed request.

    Raises :class:`InvalidMessage` for unknown kinds and for payloads that do
    not satisfy the message contract.  Range checks on ``index``/``num`` are
    left to the move validator.
    """

    try:
        message_kind = MessageKind(kind)
    except ValueError as exc:
        raise InvalidMessage(f"Unknown message type {kind!r}.") from exc

    if payload is None:
        payload = {}
    try:
        contracts.assert_valid(payload, message_kind.value)
    except ContractViolation as exc:
        raise InvalidMessage(str(exc)) from exc

    if message_kind is MessageKind.FILL:
        return FillRequest(index=payload["index"], num=payload["num"])
    return CompleteRequest()
