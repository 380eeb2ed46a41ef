"""ASGI endpoint for the MCP streamable HTTP surface at /mcp.

POST   submit protocol messages (initialize opens a new session)
GET    server-to-client stream for an existing session
DELETE terminate a session
"""

import asyncio
import json
import logging
from typing import Any

from mcp.server.streamable_http import MCP_SESSION_ID_HEADER
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import Message, Receive, Scope, Send

from odds_mcp.exceptions import (
    JSONRPC_INTERNAL_ERROR,
    JSONRPC_PARSE_ERROR,
    OddsMcpError,
    SessionNotFoundError,
)
from odds_mcp.sessions.manager import SessionManager
from odds_mcp.sessions.store import Session

logger = logging.getLogger(__name__)


def is_initialize_request(payload: Any) -> bool:
    """True for an ``initialize`` request, alone or inside a batch."""
    if isinstance(payload, list):
        return any(is_initialize_request(item) for item in payload)
    return isinstance(payload, dict) and payload.get("method") == "initialize" and "id" in payload


def _request_id(payload: Any) -> str | int | None:
    if isinstance(payload, dict):
        return payload.get("id")
    return None


def jsonrpc_error(
    status_code: int,
    code: int,
    message: str,
    *,
    data: Any = None,
    request_id: str | int | None = None,
) -> JSONResponse:
    """JSON-RPC 2.0 error envelope."""
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return JSONResponse(
        status_code=status_code,
        content={"jsonrpc": "2.0", "error": error, "id": request_id},
    )


class _ResponseTracker:
    """Wraps ``send`` to remember the response status once it has started."""

    def __init__(self, send: Send):
        self._send = send
        self.status: int | None = None

    @property
    def started(self) -> bool:
        return self.status is not None

    @property
    def succeeded(self) -> bool:
        return self.status is not None and self.status < 400

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status = message["status"]
        await self._send(message)


def _replay_body(body: bytes, receive: Receive) -> Receive:
    """Receive callable that yields an already-read body once, then defers to ``receive``."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class McpEndpoint:
    """Routes /mcp requests to the transport of the session they belong to."""

    def __init__(self, manager: SessionManager, *, request_timeout: float | None = 30.0):
        self.manager = manager
        self.request_timeout = request_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        if request.method == "POST":
            await self._handle_post(request, send)
        elif request.method == "GET":
            await self._handle_stream(request, send)
        elif request.method == "DELETE":
            await self._handle_delete(request, send)
        else:
            response = jsonrpc_error(405, JSONRPC_INTERNAL_ERROR, "Method not allowed")
            await response(scope, receive, send)

    async def _handle_post(self, request: Request, send: Send) -> None:
        logger.debug("MCP POST request received")
        body = await request.body()
        receive = _replay_body(body, request.receive)

        try:
            payload = json.loads(body)
        except ValueError as e:
            response = jsonrpc_error(400, JSONRPC_PARSE_ERROR, "Parse error", data=str(e))
            await response(request.scope, receive, send)
            return

        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        tracker = _ResponseTracker(send)
        provisioned: Session | None = None
        try:
            if session_id is None or is_initialize_request(payload):
                session = provisioned = await self.manager.open_session(session_id)
            else:
                session = self.manager.lookup(session_id)

            await self._dispatch(session, request.scope, receive, tracker, timeout=self.request_timeout)
            logger.debug(f"MCP request processed for session {session.session_id}")
        except Exception as e:
            await self._fail(e, request.scope, receive, tracker, request_id=_request_id(payload))

        # A session whose first request was refused can never be used
        if provisioned is not None and not tracker.succeeded:
            logger.info(f"Request rejected with status {tracker.status}, discarding new session")
            await self.manager.discard(provisioned)

    async def _handle_stream(self, request: Request, send: Send) -> None:
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        tracker = _ResponseTracker(send)
        try:
            session = self.manager.lookup(session_id)
        except SessionNotFoundError:
            response = jsonrpc_error(400, JSONRPC_INTERNAL_ERROR, "Invalid or missing session ID")
            await response(request.scope, request.receive, send)
            return

        try:
            # Push streams stay open as long as the client wants them
            await self._dispatch(session, request.scope, request.receive, tracker, timeout=None)
        except Exception as e:
            await self._fail(e, request.scope, request.receive, tracker)

    async def _handle_delete(self, request: Request, send: Send) -> None:
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        tracker = _ResponseTracker(send)
        try:
            session = self.manager.lookup(session_id)
            await self._dispatch(session, request.scope, request.receive, tracker, timeout=self.request_timeout)
            await self.manager.close_session(session.session_id)
        except Exception as e:
            await self._fail(e, request.scope, request.receive, tracker)

    async def _dispatch(
        self,
        session: Session,
        scope: Scope,
        receive: Receive,
        send: _ResponseTracker,
        *,
        timeout: float | None,
    ) -> None:
        with session.track_request():
            handled = session.transport.handle_request(scope, receive, send)
            if timeout is None:
                await handled
            else:
                await asyncio.wait_for(handled, timeout=timeout)

    async def _fail(
        self,
        exc: Exception,
        scope: Scope,
        receive: Receive,
        tracker: _ResponseTracker,
        *,
        request_id: str | int | None = None,
    ) -> None:
        """Write an error envelope unless part of the response already went out."""
        if isinstance(exc, OddsMcpError):
            log = logger.info if isinstance(exc, SessionNotFoundError) else logger.error
            log(f"MCP request failed: {exc.message}")
            response = jsonrpc_error(
                exc.http_status,
                exc.jsonrpc_code,
                exc.message,
                data=exc.details or None,
                request_id=request_id,
            )
        elif isinstance(exc, asyncio.TimeoutError):
            logger.error(f"MCP request timed out after {self.request_timeout}s")
            response = jsonrpc_error(
                504,
                JSONRPC_INTERNAL_ERROR,
                "Request timed out",
                request_id=request_id,
            )
        else:
            logger.exception("Error handling MCP request")
            response = jsonrpc_error(
                500,
                JSONRPC_INTERNAL_ERROR,
                "Internal server error",
                data=str(exc),
                request_id=request_id,
            )

        if tracker.started:
            logger.warning("Response already started, dropping error envelope")
            return
        await response(scope, receive, tracker)
