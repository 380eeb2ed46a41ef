from odds_mcp.sessions.manager import SessionManager
from odds_mcp.sessions.store import Session, SessionState, SessionStore
from odds_mcp.sessions.transport import SessionTransport

__all__ = [
    "Session",
    "SessionManager",
    "SessionState",
    "SessionStore",
    "SessionTransport",
]
