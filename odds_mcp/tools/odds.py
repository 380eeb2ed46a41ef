import logging
from datetime import tzinfo

from odds_mcp.providers.base import ProviderInterface
from odds_mcp.schemas import FetchSportsOddsInput
from odds_mcp.services.report import render_odds_report

logger = logging.getLogger(__name__)


async def fetch_sports_odds(
    provider: ProviderInterface,
    params: FetchSportsOddsInput,
    *,
    tz: tzinfo | None = None,
) -> str:
    """Fetch current odds for a sport and render them as a text report."""
    sport = params.sport.value
    logger.info(f"fetch_sports_odds sport={sport} markets={params.markets} regions={params.regions}")

    games = await provider.fetch_odds(sport, params.markets, params.regions)
    return render_odds_report(sport, params.markets, params.regions, games, tz=tz)
