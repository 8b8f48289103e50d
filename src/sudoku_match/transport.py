"""Transport interface between a session and its host runtime."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Set, Tuple

Callback = Callable[[], Optional[Awaitable[None]]]


class ScheduledCall(Protocol):
    """Handle returned by :meth:`Transport.schedule_once`."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not fired yet."""


class Transport(Protocol):
    """Capabilities the host runtime provides to a session.

    Sends are fire-and-forget.  Scheduled callbacks must run on the same
    logical timeline as message handlers, never concurrently with one.
    """

    def send(self, client_id: str, message: str, payload: Any = None) -> None:
        """Deliver ``message`` to a single client."""

    def broadcast(self, message: str, payload: Any = None) -> None:
        """Deliver ``message`` to every connected client."""

    def schedule_once(self, delay_s: float, callback: Callback) -> ScheduledCall:
        """Run ``callback`` once after ``delay_s`` seconds."""

    def lock(self) -> None:
        """Stop the host from routing new clients to this session."""

    async def disconnect(self) -> None:
        """Force-disconnect every remaining client."""


@dataclass
class Delivery:
    target: Optional[str]
    message: str
    payload: Any


@dataclass
class _Timer:
    due: float
    seq: int
    callback: Callback
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class InMemoryTransport:
    """Deterministic transport recording every delivery, driven by a manual clock."""

    connected: Set[str] = field(default_factory=set)
    outbox: List[Delivery] = field(default_factory=list)
    locked: bool = False
    disconnected: bool = False
    now: float = 0.0
    _timers: List[_Timer] = field(default_factory=list)
    _seq: int = 0

    def connect(self, client_id: str) -> None:
        self.connected.add(client_id)

    def send(self, client_id: str, message: str, payload: Any = None) -> None:
        self.outbox.append(Delivery(client_id, str(message), payload))

    def broadcast(self, message: str, payload: Any = None) -> None:
        self.outbox.append(Delivery(None, str(message), payload))

    def schedule_once(self, delay_s: float, callback: Callback) -> _Timer:
        self._seq += 1
        timer = _Timer(due=self.now + max(0.0, delay_s), seq=self._seq, callback=callback)
        self._timers.append(timer)
        return timer

    def lock(self) -> None:
        self.locked = True

    async def disconnect(self) -> None:
        self.connected.clear()
        self.disconnected = True

    def pending_timers(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    async def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in schedule order."""

        deadline = self.now + seconds
        while True:
            due = sorted(
                (t for t in self._timers if not t.cancelled and t.due <= deadline),
                key=lambda t: (t.due, t.seq),
            )
            if not due:
                break
            timer = due[0]
            self._timers.remove(timer)
            self.now = max(self.now, timer.due)
            result = timer.callback()
            if inspect.isawaitable(result):
                await result
        self.now = deadline

    def received(self, client_id: str) -> List[Tuple[str, Any]]:
        """Messages observed by ``client_id``: its private sends plus broadcasts."""

        return [(d.message, d.payload) for d in self.outbox if d.target in (None, client_id)]

    def broadcasts(self, message: str | None = None) -> List[Any]:
        return [
            d.payload
            for d in self.outbox
            if d.target is None and (message is None or d.message == str(message))
        ]


__all__ = ["Callback", "Delivery", "InMemoryTransport", "ScheduledCall", "Transport"]
