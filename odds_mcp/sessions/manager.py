"""Session lifecycle: provisioning, routing lookups, closure and idle reaping."""

import asyncio
import logging
import time
from collections.abc import Callable
from uuid import uuid4

from mcp.server.lowlevel import Server

from odds_mcp.exceptions import TransportError
from odds_mcp.services.metrics import KEY_SESSIONS_CLOSED, metrics_service
from odds_mcp.sessions.store import Session, SessionStore
from odds_mcp.sessions.transport import SessionTransport

logger = logging.getLogger(__name__)

TransportFactory = Callable[[str], SessionTransport]


class SessionManager:
    """Owns the session table and every session's transport.

    Provisioning is serialized per session id; requests for unrelated
    sessions never wait on each other.
    """

    def __init__(
        self,
        server_factory: Callable[[], Server],
        *,
        store: SessionStore | None = None,
        transport_factory: TransportFactory | None = None,
        idle_timeout: float | None = 1800,
        reap_interval: float = 60,
    ):
        self.server_factory = server_factory
        self.store = store if store is not None else SessionStore()
        self.transport_factory = transport_factory or SessionTransport
        self.idle_timeout = idle_timeout
        self.reap_interval = reap_interval
        self._locks: dict[str, asyncio.Lock] = {}
        self._reaper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self.store)

    async def open_session(self, session_id: str | None = None) -> Session:
        """Provision a new transport and protocol server.

        A caller-supplied id that is already live gets its old transport
        closed first, so one id never maps to two transports.
        """
        session_id = session_id or uuid4().hex
        lock = self._locks.setdefault(session_id, asyncio.Lock())

        try:
            async with lock:
                existing = self.store.get(session_id)
                if existing is not None:
                    logger.info(f"Replacing transport for session {session_id}")
                    await self._close(existing)

                logger.info(f"Creating new transport for session {session_id}")
                transport = self.transport_factory(session_id)
                session = self.store.create(Session(session_id=session_id, transport=transport))
                transport.on_close = lambda: self._on_transport_closed(session)

                try:
                    await transport.start(self.server_factory())
                except Exception as e:
                    self.store.remove(session_id, session)
                    session.mark_closed()
                    logger.error(f"Failed to start transport for session {session_id}: {e}")
                    raise TransportError(f"Failed to start transport: {e}", session_id=session_id)

                session.mark_open()
                await metrics_service.track_session_opened()
                return session
        finally:
            self._drop_lock(session_id)

    def lookup(self, session_id: str | None) -> Session:
        """Existing open session for an id; raises SessionNotFoundError."""
        return self.store.lookup(session_id)

    def _drop_lock(self, session_id: str) -> None:
        lock = self._locks.get(session_id)
        if lock is not None and not lock.locked() and session_id not in self.store:
            del self._locks[session_id]

    def _on_transport_closed(self, session: Session) -> None:
        session.mark_closed()
        if self.store.remove(session.session_id, session) is not None:
            logger.info(f"Transport closed for session {session.session_id}, removing from sessions")
            metrics_service.count(KEY_SESSIONS_CLOSED)
        self._drop_lock(session.session_id)

    async def _close(self, session: Session) -> None:
        await session.transport.close()
        # Transports that never started never report closure themselves
        self._on_transport_closed(session)

    async def close_session(self, session_id: str) -> bool:
        session = self.store.get(session_id)
        if session is None:
            return False
        logger.info(f"Closing transport for session {session_id}")
        await self._close(session)
        return True

    async def discard(self, session: Session) -> None:
        """Close a session unless another transport has since taken its id."""
        if self.store.get(session.session_id) is not session:
            return
        logger.info(f"Discarding session {session.session_id}")
        try:
            await self._close(session)
        except Exception as e:
            logger.error(f"Error closing transport for session {session.session_id}: {e}")
            self.store.remove(session.session_id, session)
            self._drop_lock(session.session_id)

    async def close_all(self) -> None:
        """Close every session; failures are logged and do not stop the others."""
        for session in self.store.sessions():
            try:
                logger.info(f"Closing transport for session {session.session_id}")
                await self._close(session)
            except Exception as e:
                logger.error(f"Error closing transport for session {session.session_id}: {e}")
                self.store.remove(session.session_id, session)

    async def reap_idle_sessions(self, now: float | None = None) -> int:
        """Close sessions idle for longer than ``idle_timeout``."""
        if not self.idle_timeout:
            return 0
        now = now if now is not None else time.monotonic()
        idle = [s for s in self.store.sessions() if s.idle_for(now) > self.idle_timeout]
        for session in idle:
            logger.info(f"Session {session.session_id} idle for {session.idle_for(now):.0f}s, closing")
            try:
                await self._close(session)
            except Exception as e:
                logger.error(f"Error closing idle session {session.session_id}: {e}")
        return len(idle)

    async def _reap_forever(self) -> None:
        while True:
            await asyncio.sleep(self.reap_interval)
            await self.reap_idle_sessions()

    async def start(self) -> None:
        if self.idle_timeout and self._reaper is None:
            self._reaper = asyncio.create_task(self._reap_forever(), name="mcp-session-reaper")

    async def stop(self) -> None:
        """Stop reaping and close all sessions."""
        if self._reaper is not None:
            self._reaper.cancel()
            try:
                await self._reaper
            except asyncio.CancelledError:
                pass
            self._reaper = None
        logger.info(f"Shutting down {len(self.store)} sessions")
        await self.close_all()
