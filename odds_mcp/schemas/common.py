from enum import Enum


class Sport(str, Enum):
    """Sports exposed by the odds tool (The Odds API sport keys)."""

    MLB = "baseball_mlb"
    NBA = "basketball_nba"
    WNBA = "basketball_wnba"
    NFL = "americanfootball_nfl"
    NHL = "icehockey_nhl"
    EPL = "soccer_epl"


class PropsSport(str, Enum):
    """Sports with player prop markets on the props tool."""

    MLB = "baseball_mlb"
    WNBA = "basketball_wnba"


DEFAULT_ODDS_MARKETS: list[str] = ["h2h"]
DEFAULT_ODDS_REGIONS = "us"

# Default player prop markets per sport
DEFAULT_PROPS_MARKETS: dict[PropsSport, list[str]] = {
    PropsSport.MLB: ["batter_home_runs", "pitcher_strikeouts"],
    PropsSport.WNBA: ["player_points", "player_rebounds", "player_assists"],
}

# Events fetched per props query, in provider order
MAX_EVENTS_PER_PROPS_QUERY = 3
