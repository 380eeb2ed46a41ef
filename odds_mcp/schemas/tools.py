from pydantic import BaseModel, ConfigDict, Field, field_validator

from odds_mcp.schemas.common import DEFAULT_ODDS_MARKETS, DEFAULT_ODDS_REGIONS, DEFAULT_PROPS_MARKETS, PropsSport, Sport


class ToolInput(BaseModel):
    model_config = ConfigDict(extra="forbid")


def _clean_markets(markets: list[str] | None) -> list[str] | None:
    if markets is None:
        return None
    cleaned = [m.strip() for m in markets]
    if not cleaned:
        raise ValueError("at least one market is required")
    if any(not m for m in cleaned):
        raise ValueError("market keys must not be blank")
    return cleaned


class FetchSportsOddsInput(ToolInput):
    sport: Sport = Field(
        ...,
        description=(
            "The sport key (e.g., 'baseball_mlb', 'basketball_nba', 'basketball_wnba', "
            "'americanfootball_nfl'). Use 'baseball_mlb' for MLB games, 'basketball_wnba' for WNBA games."
        ),
    )
    markets: list[str] = Field(
        DEFAULT_ODDS_MARKETS,
        description=(
            "Market types to fetch (e.g., 'h2h' for moneyline, 'spreads', 'totals'). "
            "For player props, check API docs for specific keys."
        ),
    )
    regions: str = Field(
        DEFAULT_ODDS_REGIONS,
        min_length=1,
        description="Geographic regions for bookmakers. Use 'us' for US bookmakers like DraftKings, FanDuel.",
    )

    @field_validator("markets")
    @classmethod
    def check_markets(cls, value: list[str]) -> list[str]:
        return _clean_markets(value)


class FetchPlayerPropsInput(ToolInput):
    sport: PropsSport = Field(..., description="Sport key - baseball_mlb or basketball_wnba supported")
    markets: list[str] | None = Field(
        None,
        description=(
            "Player prop markets. MLB: batter_home_runs, batter_hits, batter_total_bases, batter_rbis, "
            "pitcher_strikeouts, pitcher_walks, pitcher_hits_allowed. "
            "WNBA: player_points, player_rebounds, player_assists"
        ),
    )
    team_filter: str | None = Field(
        None,
        description="Filter games by team name (e.g., 'Yankees', 'Blue Jays')",
    )

    @field_validator("markets")
    @classmethod
    def check_markets(cls, value: list[str] | None) -> list[str] | None:
        return _clean_markets(value)

    @field_validator("team_filter")
    @classmethod
    def blank_filter_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def resolved_markets(self) -> list[str]:
        """Requested markets, or the sport's default prop markets."""
        if self.markets is not None:
            return self.markets
        return list(DEFAULT_PROPS_MARKETS[self.sport])
