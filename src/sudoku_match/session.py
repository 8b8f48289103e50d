"""Match session state machine for one two-player Sudoku room.

A session is a single logical actor: the host delivers joins, leaves and
client messages one at a time, and timers fire on the same timeline.  The
only suspension points are the awaited match-service calls, so every
continuation after one of them re-reads live state instead of trusting what
it saw before the call.

Phases only move forward::

    WAITING_FOR_PLAYERS -> MATCH_ACTIVE -> MATCH_ENDED

A failed match creation never reaches ``MATCH_ACTIVE``; the session is
cancelled and disposed instead.
"""

from __future__ import annotations

import enum
import logging
import time
import uuid
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from . import event_log
from .errors import InvalidMessage, MatchServiceError, SessionLockedError
from .board import CELLS
from .generator import PuzzleGenerator
from .match_service import MatchService
from .messages import (
    NOT_RUNNING,
    SERVER_ERROR,
    CompleteRequest,
    FillRequest,
    InboundMessage,
    MessageKind,
    ServerMessage,
    parse_message,
)
from .project_config import SessionConfig, load_session_config
from .records import (
    RESULT_LOSE,
    RESULT_WIN,
    MatchRecord,
    PlayerProfile,
    PlayerProgress,
    PlayerResult,
)
from .transport import ScheduledCall, Transport
from .validator import is_solved, is_valid_move

_LOGGER = logging.getLogger(__name__)

CANCEL_REASON_CREATE_FAILED = "Failed to create match."


class GamePhase(enum.IntEnum):
    WAITING_FOR_PLAYERS = 0
    MATCH_ACTIVE = 1
    MATCH_ENDED = 2


@dataclass
class _PendingReconnect:
    progress: PlayerProgress
    timer: ScheduledCall


class SudokuSession:
    """Two-player match session driven by host lifecycle hooks."""

    def __init__(
        self,
        transport: Transport,
        match_service: MatchService,
        *,
        config: SessionConfig | None = None,
        generator: Callable[[float], Tuple[int, ...]] | None = None,
        session_id: str | None = None,
    ) -> None:
        self.transport = transport
        self.match_service = match_service
        self.config = config or load_session_config()
        self.session_id = session_id or str(uuid.uuid4())
        self._generate = generator or PuzzleGenerator().generate
        if self.config.events_dir:
            event_log.configure_from(self.config)

        self._phase = GamePhase.WAITING_FOR_PLAYERS
        self._puzzle: Optional[Tuple[int, ...]] = None
        self._players: Dict[str, PlayerProgress] = {}
        self._reconnecting: Dict[str, _PendingReconnect] = {}
        self._winner_id: Optional[str] = None
        self._match_handle: Any = None
        self._locked = False
        self._disposing = False
        self._disposed = False
        self._dispose_timer: Optional[ScheduledCall] = None

    # ---------- read-only views ----------

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def puzzle(self) -> Optional[Tuple[int, ...]]:
        return self._puzzle

    @property
    def players(self) -> Mapping[str, PlayerProgress]:
        return MappingProxyType(self._players)

    @property
    def winner_id(self) -> Optional[str]:
        return self._winner_id

    @property
    def match_handle(self) -> Any:
        return self._match_handle

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def disposing(self) -> bool:
        return self._disposing

    @property
    def disposed(self) -> bool:
        return self._disposed

    def is_reconnecting(self, client_id: str) -> bool:
        return client_id in self._reconnecting

    # ---------- helpers ----------

    def _advance(self, phase: GamePhase) -> None:
        if phase <= self._phase:
            raise RuntimeError(f"phase cannot move from {self._phase.name} to {phase.name}")
        _LOGGER.info("session %s: %s -> %s", self.session_id, self._phase.name, phase.name)
        self._phase = phase

    def _record(self, event: str, **fields: Any) -> None:
        event_log.append_event({"event": event, "session_id": self.session_id, **fields})

    def _roster(self) -> Dict[str, PlayerProgress]:
        """Seated players plus those inside their reconnection window."""

        roster = dict(self._players)
        for client_id, pending in self._reconnecting.items():
            roster.setdefault(client_id, pending.progress)
        return roster

    # ---------- lifecycle hooks ----------

    async def on_join(self, client_id: str, auth: Mapping[str, Any] | PlayerProfile) -> PlayerProgress:
        """Seat a player; the second seat starts the match."""

        if self._locked or self._disposing:
            raise SessionLockedError(f"session {self.session_id} is not accepting players")
        if client_id in self._players or client_id in self._reconnecting:
            raise SessionLockedError(f"client {client_id} is already part of session {self.session_id}")
        if len(self._players) >= self.config.max_players:
            raise SessionLockedError(f"session {self.session_id} is full")

        profile = auth if isinstance(auth, PlayerProfile) else PlayerProfile.from_auth(auth)
        progress = PlayerProgress(profile=profile)
        self._players[client_id] = progress
        _LOGGER.info("session %s: %s joined as %s", self.session_id, client_id, profile.player_id)

        if self._room_filled():
            await self._start_match()
        return progress

    def _room_filled(self) -> bool:
        return (
            self._phase is GamePhase.WAITING_FOR_PLAYERS
            and not self._locked
            and len(self._players) == self.config.max_players
        )

    def on_leave(self, client_id: str, consented: bool = False) -> None:
        """Unseat a player and open a reconnection window for them."""

        if self._disposing:
            return
        progress = self._players.pop(client_id, None)
        if progress is None:
            return

        window = self.config.reconnect_window_s
        timer = self.transport.schedule_once(window, lambda: self._finalize_departure(client_id))
        self._reconnecting[client_id] = _PendingReconnect(progress=progress, timer=timer)
        _LOGGER.info(
            "session %s: %s left (consented=%s), reconnection window %.1fs",
            self.session_id,
            client_id,
            consented,
            window,
        )

    async def on_reconnect(self, client_id: str) -> bool:
        """Restore a player inside their reconnection window.

        A restored seat that fills a waiting room starts the match.
        """

        if self._disposing:
            return False
        pending = self._reconnecting.get(client_id)
        if pending is None or len(self._players) >= self.config.max_players:
            return False
        del self._reconnecting[client_id]
        pending.timer.cancel()
        self._players[client_id] = pending.progress
        _LOGGER.info("session %s: %s reconnected", self.session_id, client_id)

        if self._room_filled():
            await self._start_match()
        return True

    def _finalize_departure(self, client_id: str) -> None:
        pending = self._reconnecting.pop(client_id, None)
        if pending is None:
            return
        _LOGGER.info(
            "session %s: %s departed after %d placements",
            self.session_id,
            client_id,
            pending.progress.filled_cells(),
        )
        self._record("player_departed", client_id=client_id, player_id=pending.progress.profile.player_id)

    async def on_dispose(self) -> None:
        """Host hook invoked when the runtime tears the session down."""

        for pending in self._reconnecting.values():
            pending.timer.cancel()
        self._reconnecting.clear()
        if self._dispose_timer is not None:
            self._dispose_timer.cancel()
        self._disposing = True
        if not self._disposed:
            self._disposed = True
            _LOGGER.info("session %s disposed", self.session_id)
            self._record("session_disposed", phase=self._phase.name)

    def _schedule_disposal(self) -> None:
        if self._disposing:
            return
        self._disposing = True
        self._dispose_timer = self.transport.schedule_once(self.config.dispose_delay_s, self._dispose)
        _LOGGER.info("session %s: disposal in %.1fs", self.session_id, self.config.dispose_delay_s)

    async def _dispose(self) -> None:
        self._dispose_timer = None
        await self.transport.disconnect()
        await self.on_dispose()

    # ---------- match lifecycle ----------

    async def _start_match(self) -> None:
        self._locked = True
        self.transport.lock()

        # Players who left before the room filled take no part in this match.
        for client_id in list(self._reconnecting):
            self._reconnecting[client_id].timer.cancel()
            self._finalize_departure(client_id)

        self._puzzle = tuple(self._generate(self.config.difficulty))
        for progress in self._players.values():
            progress.reset(self._puzzle)
        player_ids = tuple(progress.profile.player_id for progress in self._players.values())

        handle: Any = None
        try:
            handle = await self.match_service.create_match(player_ids, self.session_id)
        except MatchServiceError as exc:
            _LOGGER.warning("session %s: match creation failed: %s", self.session_id, exc)

        if self._disposing:
            return
        if not handle:
            self._cancel_match(CANCEL_REASON_CREATE_FAILED)
            return

        roster = tuple(progress.profile.player_id for progress in self._players.values())
        if roster != player_ids:
            _LOGGER.warning(
                "session %s: roster changed while creating the match (%s -> %s)",
                self.session_id,
                player_ids,
                roster,
            )

        self._match_handle = handle
        self._advance(GamePhase.MATCH_ACTIVE)
        self.transport.broadcast(ServerMessage.MATCH_STARTED, {})
        self._record("match_started", players=list(player_ids))

    def _cancel_match(self, reason: str) -> None:
        _LOGGER.warning("session %s: match canceled: %s", self.session_id, reason)
        self.transport.broadcast(ServerMessage.MATCH_CANCELED, {"reason": reason})
        self._record("match_canceled", reason=reason)
        self._schedule_disposal()

    # ---------- message handling ----------

    async def on_message(self, client_id: str, kind: str, payload: Any = None) -> None:
        """Entry point for every client message."""

        try:
            try:
                message = parse_message(kind, payload)
            except InvalidMessage as exc:
                if self._phase is not GamePhase.MATCH_ACTIVE:
                    self.transport.send(client_id, ServerMessage.ERROR, NOT_RUNNING)
                else:
                    self._reject(client_id, kind, str(exc))
                return
            await self._dispatch(client_id, message)
        except Exception:
            _LOGGER.exception("session %s: unhandled error in %r from %s", self.session_id, kind, client_id)
            if self._players:
                self.transport.broadcast(ServerMessage.SERVER_ERROR, {"message": SERVER_ERROR})

    def _reject(self, client_id: str, kind: str, error: str) -> None:
        if kind == MessageKind.FILL:
            self.transport.send(client_id, ServerMessage.INVALID_MOVE, {"error": error})
        else:
            self.transport.send(client_id, ServerMessage.ERROR, error)

    async def _dispatch(self, client_id: str, message: InboundMessage) -> None:
        if self._phase is not GamePhase.MATCH_ACTIVE:
            self.transport.send(client_id, ServerMessage.ERROR, NOT_RUNNING)
            return

        if isinstance(message, FillRequest):
            self._handle_fill(client_id, message)
        elif isinstance(message, CompleteRequest):
            await self._handle_complete(client_id)
        else:  # pragma: no cover - parse_message only yields the types above
            raise TypeError(f"unsupported message {message!r}")

    def _handle_fill(self, client_id: str, request: FillRequest) -> None:
        progress = self._players.get(client_id)
        if progress is None:
            self.transport.send(client_id, ServerMessage.INVALID_MOVE, {"error": "Player is not seated."})
            return
        if self._puzzle is None:
            raise RuntimeError(f"session {self.session_id} is active without a puzzle")

        if not is_valid_move(request.index, self._puzzle, request.num):
            self.transport.send(
                client_id,
                ServerMessage.INVALID_MOVE,
                {"error": f"{request.index} index is not a valid move."},
            )
            return

        progress.place(request.index, request.num)
        self.transport.broadcast(ServerMessage.PLAYER_MOVED, {"player": client_id, "index": request.index})

    async def _handle_complete(self, client_id: str) -> None:
        progress = self._players.get(client_id)
        if progress is None or not is_solved(progress.private_board):
            # TODO: send feedback for incorrect submissions once clients can display it.
            _LOGGER.debug("session %s: %s submitted an unsolved board", self.session_id, client_id)
            return

        self._winner_id = client_id
        self._advance(GamePhase.MATCH_ENDED)
        self.transport.broadcast(
            ServerMessage.COMPLETED,
            {"winnerId": client_id, "playerName": progress.profile.display_name},
        )

        record = self._build_record(client_id)
        self._record("match_completed", winner=record.winner, winner_client=client_id)
        self._schedule_disposal()

        try:
            acknowledged = await self.match_service.finish_match(self.session_id, record)
        except MatchServiceError as exc:
            _LOGGER.warning("session %s: reporting the result failed: %s", self.session_id, exc)
            self._record("match_finish_failed", winner=record.winner)
            return
        if not acknowledged:
            _LOGGER.warning("session %s: match service did not acknowledge the result", self.session_id)
            self._record("match_finish_failed", winner=record.winner)

    def _build_record(self, winner_client: str) -> MatchRecord:
        roster = {
            client_id: progress
            for client_id, progress in self._roster().items()
            if len(progress.private_board) == CELLS
        }
        winner = roster[winner_client].profile.player_id
        players = tuple(
            PlayerResult(
                player_id=progress.profile.player_id,
                board=tuple(progress.private_board),
                result=RESULT_WIN if client_id == winner_client else RESULT_LOSE,
            )
            for client_id, progress in roster.items()
        )
        return MatchRecord(winner=winner, end_time=int(time.time() * 1000), players=players)


__all__ = ["CANCEL_REASON_CREATE_FAILED", "GamePhase", "SudokuSession"]
