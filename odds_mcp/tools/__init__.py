from odds_mcp.tools.props import PlayerPropsPipeline
from odds_mcp.tools.registry import FETCH_PLAYER_PROPS, FETCH_SPORTS_ODDS, ToolDefinition, ToolRegistry

__all__ = [
    "FETCH_PLAYER_PROPS",
    "FETCH_SPORTS_ODDS",
    "PlayerPropsPipeline",
    "ToolDefinition",
    "ToolRegistry",
]
