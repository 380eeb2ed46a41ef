"""Metrics service for tracking API usage and performance."""

import logging
from collections import Counter
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

# Counter keys
KEY_REQUEST_COUNT = "requests"
KEY_ERROR_COUNT = "errors"
KEY_LATENCY_SUM = "latency_sum"
KEY_LATENCY_COUNT = "latency_count"
KEY_SESSIONS_OPENED = "sessions_opened"
KEY_SESSIONS_CLOSED = "sessions_closed"
KEY_TOOL_CALLS = "tool_calls"
KEY_TOOL_ERRORS = "tool_errors"
KEY_API_CALLS = "api_calls"


class MetricsService:
    """In-process counters, reset on restart."""

    def __init__(self):
        self._counters: Counter[str] = Counter()
        self._requests_remaining: int | None = None
        self._last_reset: str | None = None

    def count(self, key: str, amount: int = 1) -> None:
        """Increment a counter from synchronous code."""
        self._counters[key] += amount

    async def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.count(key, amount)

    async def get_value(self, key: str) -> int:
        """Get a counter value."""
        return self._counters[key]

    async def track_request(self) -> None:
        """Track an HTTP request."""
        await self.increment(KEY_REQUEST_COUNT)

    async def track_error(self) -> None:
        """Track an HTTP error response."""
        await self.increment(KEY_ERROR_COUNT)

    async def track_latency(self, latency_ms: float) -> None:
        """Track request latency."""
        await self.increment(KEY_LATENCY_SUM, int(latency_ms))
        await self.increment(KEY_LATENCY_COUNT)

    async def track_session_opened(self) -> None:
        await self.increment(KEY_SESSIONS_OPENED)

    async def track_tool_call(self) -> None:
        await self.increment(KEY_TOOL_CALLS)

    async def track_tool_error(self) -> None:
        await self.increment(KEY_TOOL_ERRORS)

    async def track_api_call(self) -> None:
        """Track an external API call."""
        await self.increment(KEY_API_CALLS)

    async def track_quota(self, remaining: int | None) -> None:
        """Record the provider's remaining request quota."""
        if remaining is not None:
            self._requests_remaining = remaining

    async def get_metrics(self, active_sessions: int | None = None) -> dict[str, Any]:
        """Get all metrics."""
        requests = await self.get_value(KEY_REQUEST_COUNT)
        errors = await self.get_value(KEY_ERROR_COUNT)
        latency_sum = await self.get_value(KEY_LATENCY_SUM)
        latency_count = await self.get_value(KEY_LATENCY_COUNT)
        tool_calls = await self.get_value(KEY_TOOL_CALLS)
        tool_errors = await self.get_value(KEY_TOOL_ERRORS)

        # Calculate averages
        avg_latency = latency_sum / latency_count if latency_count > 0 else 0
        error_rate = (errors / requests * 100) if requests > 0 else 0
        tool_error_rate = (tool_errors / tool_calls * 100) if tool_calls > 0 else 0

        return {
            "requests": {
                "total": requests,
                "errors": errors,
                "error_rate_percent": round(error_rate, 2),
            },
            "latency": {
                "avg_ms": round(avg_latency, 2),
                "samples": latency_count,
            },
            "sessions": {
                "opened": await self.get_value(KEY_SESSIONS_OPENED),
                "closed": await self.get_value(KEY_SESSIONS_CLOSED),
                "active": active_sessions,
            },
            "tools": {
                "calls": tool_calls,
                "errors": tool_errors,
                "error_rate_percent": round(tool_error_rate, 2),
            },
            "external_api": {
                "calls": await self.get_value(KEY_API_CALLS),
                "requests_remaining": self._requests_remaining,
            },
            "last_reset": self._last_reset,
            "collected_at": datetime.now().isoformat(),
        }

    async def reset(self) -> None:
        """Reset all metrics."""
        self._counters.clear()
        self._requests_remaining = None
        self._last_reset = datetime.now().isoformat()
        logger.info("Metrics reset")


metrics_service = MetricsService()
