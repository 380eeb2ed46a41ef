import asyncio
import logging
from collections.abc import Callable

from mcp.server.lowlevel import Server
from mcp.server.streamable_http import StreamableHTTPServerTransport
from starlette.types import Receive, Scope, Send

from odds_mcp.exceptions import TransportError

logger = logging.getLogger(__name__)


class SessionTransport:
    """Streamable HTTP transport for one session plus the server task reading from it.

    ``on_close`` is called once, when the server task ends for any reason.
    """

    def __init__(
        self,
        session_id: str,
        *,
        json_response: bool = False,
        close_timeout: float = 5.0,
    ):
        self.session_id = session_id
        self.close_timeout = close_timeout
        self.on_close: Callable[[], None] | None = None
        self._transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=json_response,
        )
        self._connected = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def start(self, server: Server) -> None:
        """Run ``server`` on this transport; returns once the streams are connected."""
        if self._task is not None:
            raise TransportError("Transport already started", session_id=self.session_id)

        self._task = asyncio.create_task(self._serve(server), name=f"mcp-session-{self.session_id}")
        connected = asyncio.create_task(self._connected.wait())
        await asyncio.wait({self._task, connected}, return_when=asyncio.FIRST_COMPLETED)

        if not self._connected.is_set():
            connected.cancel()
            raise TransportError("Transport closed before it connected", session_id=self.session_id)

    async def _serve(self, server: Server) -> None:
        try:
            async with self._transport.connect() as (read_stream, write_stream):
                self._connected.set()
                await server.run(read_stream, write_stream, server.create_initialization_options())
        except Exception:
            logger.exception(f"Transport failed for session {self.session_id}")
        finally:
            self._closed = True
            if self.on_close is not None:
                self.on_close()

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self._closed:
            raise TransportError("Transport is closed", session_id=self.session_id)
        await self._transport.handle_request(scope, receive, send)

    async def close(self) -> None:
        """Terminate the transport and wait for the server task to finish."""
        if not self._transport.is_terminated:
            await self._transport.terminate()
        if self._task is None or self._task.done():
            self._closed = True
            return
        try:
            await asyncio.wait_for(self._task, timeout=self.close_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Server task for session {self.session_id} did not stop in {self.close_timeout}s")
