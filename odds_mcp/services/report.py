"""Plain-text reports for tool results.

Rendering is a pure function of its inputs; only the ``Generated:`` line
depends on the clock, and callers can pin it with ``generated_at``.
"""

from collections.abc import Sequence
from datetime import datetime, timezone, tzinfo

from odds_mcp.schemas import EventOddsResult, Game, Market, Outcome


def format_number(value: float) -> str:
    """Render a price or point the way the provider sends it (2.0 -> "2")."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_time(value: datetime, tz: tzinfo | None = None) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz or timezone.utc).strftime("%Y-%m-%d %I:%M %p %Z")


def market_title(key: str) -> str:
    """batter_home_runs -> BATTER HOME RUNS"""
    return key.replace("_", " ").upper()


def _header(
    title: str,
    sport: str,
    markets: Sequence[str],
    generated_at: datetime | None,
    tz: tzinfo | None,
) -> list[str]:
    generated = generated_at or datetime.now(tz or timezone.utc)
    return [
        f"{title} - {sport.upper()}",
        f"Generated: {format_time(generated, tz)}",
        f"Markets: {', '.join(markets)}",
    ]


def _outcome_line(outcome: Outcome) -> str:
    line = f"{outcome.name} ({format_number(outcome.price)})"
    if outcome.point is not None:
        line += f" {format_number(outcome.point)}"
    return line


def _market_line(market: Market) -> str:
    if not market.outcomes:
        return f"     {market.key}: no data available"
    return f"     {market.key}: " + ", ".join(_outcome_line(o) for o in market.outcomes)


def render_odds_report(
    sport: str,
    markets: Sequence[str],
    regions: str,
    games: Sequence[Game],
    *,
    generated_at: datetime | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Report for fetch_sports_odds: one block per game, one line per market."""
    lines = _header("Sports Odds Report", sport, markets, generated_at, tz)
    lines.append(f"Regions: {regions}")
    lines.append("")

    if not games:
        lines.append("No games found for this sport.")
        return "\n".join(lines) + "\n"

    lines.append(f"Found {len(games)} games:")
    lines.append("")

    for index, game in enumerate(games, start=1):
        lines.append(f"{index}. {game.matchup}")
        lines.append(f"   Starts: {format_time(game.commence_time, tz)}")

        if not game.bookmakers:
            lines.append("   No bookmaker data available for this game")
        for bookmaker in game.bookmakers:
            lines.append(f"   {bookmaker.title}:")
            if not bookmaker.markets:
                lines.append("     no data available")
            lines.extend(_market_line(market) for market in bookmaker.markets)
        lines.append("")

    return "\n".join(lines) + "\n"


def _props_block(
    result: EventOddsResult,
    bookmaker: str,
    bookmaker_title: str,
    tz: tzinfo | None,
) -> list[str]:
    event = result.event
    lines = [f"--- {event.matchup} ---"]

    if not result.ok:
        lines.append(f"Error: {result.error}")
        return lines

    lines.append(f"Starts: {format_time(event.commence_time, tz)}")

    game = result.game
    if game is None or not game.bookmakers:
        lines.append("No bookmaker data available for this game")
        return lines

    quote = game.bookmaker(bookmaker)
    if quote is None or not quote.markets:
        lines.append(f"No {bookmaker_title} props available for this game")
        return lines

    for market in quote.markets:
        lines.append("")
        lines.append(f"{market_title(market.key)}:")
        if not market.outcomes:
            lines.append("  No data available")
        for outcome in market.outcomes:
            player = outcome.description or outcome.name
            point = f" {format_number(outcome.point)}" if outcome.point is not None else ""
            lines.append(f"  {player}: {outcome.name}{point} ({format_number(outcome.price)})")
    return lines


def render_props_report(
    sport: str,
    markets: Sequence[str],
    team_filter: str | None,
    results: Sequence[EventOddsResult],
    *,
    generated_at: datetime | None = None,
    tz: tzinfo | None = None,
    bookmaker: str = "draftkings",
    bookmaker_title: str = "DraftKings",
) -> str:
    """Report for fetch_player_props: one section per event, failed events inline."""
    lines = _header("Player Props Report", sport, markets, generated_at, tz)
    if team_filter:
        lines.append(f"Team Filter: {team_filter}")
    lines.append("")

    if not results:
        if team_filter:
            lines.append(f'No games found for team "{team_filter}" today.')
        else:
            lines.append("No games found for this sport today.")
        return "\n".join(lines) + "\n"

    lines.append(f"Processing {len(results)} games:")
    lines.append("")

    for result in results:
        lines.extend(_props_block(result, bookmaker, bookmaker_title, tz))
        lines.append("")

    return "\n".join(lines) + "\n"
