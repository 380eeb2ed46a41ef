from odds_mcp.schemas.common import (
    DEFAULT_ODDS_MARKETS,
    DEFAULT_ODDS_REGIONS,
    DEFAULT_PROPS_MARKETS,
    MAX_EVENTS_PER_PROPS_QUERY,
    PropsSport,
    Sport,
)
from odds_mcp.schemas.odds import Bookmaker, EventOddsResult, Game, Market, Outcome
from odds_mcp.schemas.tools import FetchPlayerPropsInput, FetchSportsOddsInput

__all__ = [
    "Bookmaker",
    "DEFAULT_ODDS_MARKETS",
    "DEFAULT_ODDS_REGIONS",
    "DEFAULT_PROPS_MARKETS",
    "EventOddsResult",
    "FetchPlayerPropsInput",
    "FetchSportsOddsInput",
    "Game",
    "MAX_EVENTS_PER_PROPS_QUERY",
    "Market",
    "Outcome",
    "PropsSport",
    "Sport",
]
