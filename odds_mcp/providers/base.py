from abc import ABC, abstractmethod

from odds_mcp.schemas import EventOddsResult, Game


class ProviderInterface(ABC):
    """Interface for odds data providers."""

    @staticmethod
    @abstractmethod
    def get_name() -> str:
        """Provider identifier (e.g., 'THE_ODDS_API')."""
        ...

    @abstractmethod
    async def fetch_odds(
        self,
        sport: str,
        markets: list[str],
        regions: str,
    ) -> list[Game]:
        """Current odds for every game of a sport."""
        ...

    @abstractmethod
    async def fetch_events(self, sport: str) -> list[Game]:
        """Upcoming events for a sport, without odds."""
        ...

    @abstractmethod
    async def fetch_event_odds(
        self,
        sport: str,
        event: Game,
        markets: list[str],
        bookmakers: str,
        regions: str = "us",
    ) -> EventOddsResult:
        """Odds for a single event; HTTP failures are returned, not raised."""
        ...
