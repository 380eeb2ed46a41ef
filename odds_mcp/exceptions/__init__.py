"""Custom exceptions for the odds MCP server."""

from typing import Any

# JSON-RPC 2.0 error codes used on the /mcp surface
JSONRPC_PARSE_ERROR = -32700
JSONRPC_INVALID_PARAMS = -32602
JSONRPC_INTERNAL_ERROR = -32603
JSONRPC_SESSION_NOT_FOUND = -32001


class OddsMcpError(Exception):
    """Base exception for all odds MCP server errors."""

    http_status: int = 500
    jsonrpc_code: int = JSONRPC_INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "ODDS_MCP_ERROR"
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dict for API response."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidArgumentError(OddsMcpError):
    """Tool arguments violate the input schema."""

    http_status = 400
    jsonrpc_code = JSONRPC_INVALID_PARAMS

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field is not None:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]  # Truncate

        super().__init__(message, code="INVALID_ARGUMENT", details=details)
        self.field = field


class ProviderError(OddsMcpError):
    """Generic failure talking to The Odds API."""

    http_status = 502

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        endpoint: str | None = None,
        code: str = "PROVIDER_ERROR",
    ):
        details: dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if response_body is not None:
            details["response_body"] = response_body[:500]  # Truncate
        if endpoint is not None:
            details["endpoint"] = endpoint

        super().__init__(message, code=code, details=details)
        self.status_code = status_code
        self.endpoint = endpoint


class ProviderHTTPError(ProviderError):
    """Non-2xx response from The Odds API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        response_body: str | None = None,
        endpoint: str | None = None,
        code: str = "PROVIDER_HTTP_ERROR",
    ):
        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            endpoint=endpoint,
            code=code,
        )


class RateLimitError(ProviderHTTPError):
    """Rate limit or usage quota exceeded on The Odds API."""

    http_status = 429

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: int | None = None,
        remaining_requests: int | None = None,
        endpoint: str | None = None,
    ):
        super().__init__(message, status_code=429, endpoint=endpoint, code="RATE_LIMIT_EXCEEDED")
        if retry_after is not None:
            self.details["retry_after"] = retry_after
        if remaining_requests is not None:
            self.details["remaining_requests"] = remaining_requests
        self.retry_after = retry_after
        self.remaining_requests = remaining_requests


class ProviderTimeoutError(ProviderError):
    """Timeout when calling The Odds API."""

    http_status = 504

    def __init__(
        self,
        message: str = "Provider request timed out",
        *,
        timeout_seconds: float | None = None,
        endpoint: str | None = None,
    ):
        super().__init__(message, endpoint=endpoint, code="PROVIDER_TIMEOUT")
        if timeout_seconds is not None:
            self.details["timeout_seconds"] = timeout_seconds


class ProviderSchemaError(ProviderError):
    """Provider payload does not have the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        expected: str | None = None,
    ):
        super().__init__(message, endpoint=endpoint, code="PROVIDER_SCHEMA_ERROR")
        if expected is not None:
            self.details["expected"] = expected


class ToolExecutionError(OddsMcpError):
    """A tool invocation failed after its arguments were accepted."""

    def __init__(self, tool: str, reason: str, *, status_code: int | None = None):
        details: dict[str, Any] = {"tool": tool}
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(f"Failed to execute {tool}: {reason}", code="TOOL_EXECUTION_ERROR", details=details)
        self.tool = tool
        self.status_code = status_code


class SessionNotFoundError(OddsMcpError):
    """Unknown or already closed session identifier."""

    http_status = 404
    jsonrpc_code = JSONRPC_SESSION_NOT_FOUND

    def __init__(self, session_id: str | None, message: str | None = None):
        super().__init__(
            message or f"Session not found: {session_id}",
            code="SESSION_NOT_FOUND",
            details={"session_id": session_id} if session_id else {},
        )
        self.session_id = session_id


class TransportError(OddsMcpError):
    """I/O failure on a session's protocol stream."""

    def __init__(self, message: str, *, session_id: str | None = None):
        super().__init__(
            message,
            code="TRANSPORT_ERROR",
            details={"session_id": session_id} if session_id else {},
        )
        self.session_id = session_id


class ConfigurationError(OddsMcpError):
    """Missing or invalid configuration detected at startup."""

    def __init__(self, message: str, *, setting: str | None = None):
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details={"setting": setting} if setting else {},
        )
        self.setting = setting
