from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProviderModel(BaseModel):
    """Base model for The Odds API payloads (unknown fields are ignored)."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class Outcome(ProviderModel):
    name: str
    price: float
    point: float | None = None
    description: str | None = None  # Player name on prop markets


class Market(ProviderModel):
    key: str
    last_update: datetime | None = None
    outcomes: list[Outcome] = []


class Bookmaker(ProviderModel):
    key: str
    title: str
    last_update: datetime | None = None
    markets: list[Market] = []


class Game(ProviderModel):
    """A game from the odds endpoints, or an event (no bookmakers) from /events."""

    id: str
    sport_key: str | None = None
    sport_title: str | None = None
    commence_time: datetime
    home_team: str
    away_team: str
    bookmakers: list[Bookmaker] = []

    @property
    def matchup(self) -> str:
        return f"{self.away_team} @ {self.home_team}"

    def involves(self, team: str) -> bool:
        """Case-insensitive substring match on either team name."""
        needle = team.lower()
        return needle in self.home_team.lower() or needle in self.away_team.lower()

    def bookmaker(self, key: str) -> Bookmaker | None:
        return next((b for b in self.bookmakers if b.key == key), None)


class EventOddsResult(BaseModel):
    """Outcome of a per-event odds fetch in the player props pipeline."""

    event: Game
    game: Game | None = None
    status_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
