"""Player props pipeline.

events -> team filter -> first N events -> per-event odds -> report
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import tzinfo

from odds_mcp.exceptions import OddsMcpError
from odds_mcp.providers.base import ProviderInterface
from odds_mcp.schemas import MAX_EVENTS_PER_PROPS_QUERY, EventOddsResult, FetchPlayerPropsInput, Game
from odds_mcp.services.report import render_props_report

logger = logging.getLogger(__name__)


def filter_events(events: Sequence[Game], team_filter: str | None) -> list[Game]:
    """Keep events where either team name contains the filter (case-insensitive)."""
    if not team_filter:
        return list(events)
    return [event for event in events if event.involves(team_filter)]


class PlayerPropsPipeline:
    """Fetches player props for a handful of events from a single bookmaker."""

    def __init__(
        self,
        provider: ProviderInterface,
        *,
        bookmaker: str = "draftkings",
        bookmaker_title: str = "DraftKings",
        region: str = "us",
        max_events: int = MAX_EVENTS_PER_PROPS_QUERY,
        concurrency: int = 1,
        tz: tzinfo | None = None,
    ):
        self.provider = provider
        self.bookmaker = bookmaker
        self.bookmaker_title = bookmaker_title
        self.region = region
        self.max_events = max_events
        self.concurrency = max(1, concurrency)
        self.tz = tz

    async def run(self, params: FetchPlayerPropsInput) -> str:
        sport = params.sport.value
        markets = params.resolved_markets
        logger.info(f"fetch_player_props sport={sport} markets={markets} team_filter={params.team_filter}")

        events = await self.provider.fetch_events(sport)

        candidates = filter_events(events, params.team_filter)
        if params.team_filter:
            logger.info(f'After filtering by "{params.team_filter}": {len(candidates)} events')

        selected = candidates[: self.max_events]
        results = await self.fetch_all(sport, selected, markets) if selected else []

        return render_props_report(
            sport,
            markets,
            params.team_filter,
            results,
            tz=self.tz,
            bookmaker=self.bookmaker,
            bookmaker_title=self.bookmaker_title,
        )

    async def fetch_all(
        self,
        sport: str,
        events: Sequence[Game],
        markets: list[str],
    ) -> list[EventOddsResult]:
        """Fetch odds for each event; results keep the provider's event order."""
        if self.concurrency == 1:
            return [await self._fetch_one(sport, event, markets) for event in events]

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(event: Game) -> EventOddsResult:
            async with semaphore:
                return await self._fetch_one(sport, event, markets)

        return list(await asyncio.gather(*(bounded(event) for event in events)))

    async def _fetch_one(self, sport: str, event: Game, markets: list[str]) -> EventOddsResult:
        logger.info(f"Fetching props for {event.matchup}")
        try:
            return await self.provider.fetch_event_odds(
                sport,
                event,
                markets,
                bookmakers=self.bookmaker,
                regions=self.region,
            )
        except OddsMcpError as e:
            logger.warning(f"Error fetching props for event {event.id}: {e.message}")
            return EventOddsResult(
                event=event,
                status_code=getattr(e, "status_code", None),
                error=e.message,
            )
