import itertools
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from odds_mcp.exceptions import SessionNotFoundError, TransportError

if TYPE_CHECKING:
    from odds_mcp.sessions.transport import SessionTransport


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    OPEN = "open"
    CLOSED = "closed"


_request_ids = itertools.count(1)


@dataclass(eq=False)
class Session:
    """One client conversation bound to a single transport."""

    session_id: str
    transport: "SessionTransport"
    state: SessionState = SessionState.UNINITIALIZED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_activity: float = field(default_factory=time.monotonic)
    in_flight: set[int] = field(default_factory=set)

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    def mark_open(self) -> None:
        if self.state is not SessionState.UNINITIALIZED:
            raise TransportError(
                f"Cannot open session in state {self.state.value}",
                session_id=self.session_id,
            )
        self.state = SessionState.OPEN

    def mark_closed(self) -> None:
        self.state = SessionState.CLOSED

    @contextmanager
    def track_request(self) -> Iterator[int]:
        """Register an in-flight request for the duration of the block."""
        request_id = next(_request_ids)
        self.in_flight.add(request_id)
        self.last_activity = time.monotonic()
        try:
            yield request_id
        finally:
            self.in_flight.discard(request_id)
            self.last_activity = time.monotonic()

    def idle_for(self, now: float | None = None) -> float:
        """Seconds since the last request finished, 0 while requests are in flight."""
        if self.in_flight:
            return 0.0
        return (now if now is not None else time.monotonic()) - self.last_activity


class SessionStore:
    """Session table keyed by session id.

    All operations are synchronous, so each one is atomic on the event loop.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self, session: Session) -> Session:
        existing = self._sessions.get(session.session_id)
        if existing is not None and existing.state is not SessionState.CLOSED:
            raise TransportError(
                f"Session {session.session_id} already has a live transport",
                session_id=session.session_id,
            )
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def lookup(self, session_id: str | None) -> Session:
        """Return the open session for an id, or raise SessionNotFoundError."""
        session = self._sessions.get(session_id) if session_id else None
        if session is None or not session.is_open:
            raise SessionNotFoundError(session_id)
        return session

    def remove(self, session_id: str, session: Session | None = None) -> Session | None:
        """Remove a session; with ``session`` given, only if it is still the registered one."""
        current = self._sessions.get(session_id)
        if current is None or (session is not None and current is not session):
            return None
        return self._sessions.pop(session_id)

    def sessions(self) -> list[Session]:
        return list(self._sessions.values())
