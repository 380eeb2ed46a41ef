import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from odds_mcp.config import settings
from odds_mcp.exceptions import (
    ProviderError,
    ProviderHTTPError,
    ProviderSchemaError,
    ProviderTimeoutError,
    RateLimitError,
)
from odds_mcp.providers.base import ProviderInterface
from odds_mcp.schemas import EventOddsResult, Game
from odds_mcp.services.metrics import metrics_service

logger = logging.getLogger(__name__)

_GAME_LIST = TypeAdapter(list[Game])


def _header_int(response: httpx.Response, name: str) -> int | None:
    value = response.headers.get(name)
    if value is None:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


class OddsAPIClient(ProviderInterface):
    """HTTP client for The Odds API v4.

    Every call is a single GET; nothing is cached or retried here.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.odds_api_key
        self.base_url = (base_url or settings.odds_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.odds_api_timeout_seconds

    @staticmethod
    def get_name() -> str:
        return "THE_ODDS_API"

    async def _request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make a GET request and return the decoded JSON body."""
        url = f"{self.base_url}{endpoint}"
        request_params = {"apiKey": self.api_key}
        if params:
            request_params.update(params)

        logger.debug(f"GET {endpoint} params={params or {}}")

        try:
            # Track external API call
            await metrics_service.track_api_call()

            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=request_params)
                await self._record_quota(response)
                response.raise_for_status()
        except httpx.TimeoutException:
            raise ProviderTimeoutError(
                f"Request to {endpoint} timed out",
                timeout_seconds=self.timeout,
                endpoint=endpoint,
            )
        except httpx.HTTPStatusError as e:
            status = e.response.status_code

            if status == 429:
                raise RateLimitError(
                    "The Odds API rate limit exceeded",
                    retry_after=_header_int(e.response, "Retry-After"),
                    remaining_requests=_header_int(e.response, "x-requests-remaining"),
                    endpoint=endpoint,
                )

            raise ProviderHTTPError(
                f"HTTP {status} from The Odds API",
                status_code=status,
                response_body=e.response.text,
                endpoint=endpoint,
            )
        except httpx.RequestError as e:
            raise ProviderError(
                f"Network error: {e}",
                endpoint=endpoint,
            )

        try:
            return response.json()
        except ValueError:
            raise ProviderSchemaError(
                f"Invalid JSON from {endpoint}",
                endpoint=endpoint,
                expected="JSON document",
            )

    async def _record_quota(self, response: httpx.Response) -> None:
        remaining = _header_int(response, "x-requests-remaining")
        if remaining is not None:
            used = response.headers.get("x-requests-used")
            logger.debug(f"The Odds API quota: {remaining} remaining, {used} used")
            await metrics_service.track_quota(remaining)

    def _parse_games(self, data: Any, endpoint: str) -> list[Game]:
        if not isinstance(data, list):
            raise ProviderSchemaError(
                "Invalid API response: expected array of games",
                endpoint=endpoint,
                expected="array",
            )
        try:
            return _GAME_LIST.validate_python(data)
        except ValidationError as e:
            raise ProviderSchemaError(
                f"Invalid game data from {endpoint} ({e.error_count()} errors)",
                endpoint=endpoint,
                expected="array of games",
            )

    async def fetch_odds(
        self,
        sport: str,
        markets: list[str],
        regions: str,
    ) -> list[Game]:
        """GET /sports/{sport}/odds - Current odds for all games of a sport."""
        endpoint = f"/sports/{sport}/odds"
        data = await self._request(
            endpoint,
            params={
                "regions": regions,
                "markets": ",".join(markets),
                "oddsFormat": "decimal",
                "dateFormat": "iso",
            },
        )
        games = self._parse_games(data, endpoint)
        logger.info(f"Fetched {len(games)} games for {sport}")
        return games

    async def fetch_events(self, sport: str) -> list[Game]:
        """GET /sports/{sport}/events - Upcoming events for a sport."""
        endpoint = f"/sports/{sport}/events"
        data = await self._request(endpoint)
        events = self._parse_games(data, endpoint)
        logger.info(f"Found {len(events)} total events for {sport}")
        return events

    async def fetch_event_odds(
        self,
        sport: str,
        event: Game,
        markets: list[str],
        bookmakers: str,
        regions: str = "us",
    ) -> EventOddsResult:
        """GET /sports/{sport}/events/{id}/odds - Odds for one event.

        A non-2xx status is returned as a failed result so that callers
        iterating over several events can keep going.
        """
        endpoint = f"/sports/{sport}/events/{event.id}/odds"
        try:
            data = await self._request(
                endpoint,
                params={
                    "regions": regions,
                    "markets": ",".join(markets),
                    "bookmakers": bookmakers,
                },
            )
        except ProviderHTTPError as e:
            logger.warning(f"Props API call failed for event {event.id}: {e.status_code}")
            return EventOddsResult(
                event=event,
                status_code=e.status_code,
                error=f"Unable to fetch props ({e.status_code})",
            )

        if not isinstance(data, dict):
            raise ProviderSchemaError(
                "Invalid API response: expected event object",
                endpoint=endpoint,
                expected="object",
            )
        try:
            game = Game.model_validate(data)
        except ValidationError as e:
            raise ProviderSchemaError(
                f"Invalid event data from {endpoint} ({e.error_count()} errors)",
                endpoint=endpoint,
                expected="event object",
            )
        return EventOddsResult(event=event, game=game)
