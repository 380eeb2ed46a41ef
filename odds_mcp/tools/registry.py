"""Tool definitions and the MCP server that exposes them."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from pydantic import ValidationError

from odds_mcp.config import Settings
from odds_mcp.exceptions import InvalidArgumentError, ProviderError, ToolExecutionError
from odds_mcp.providers.base import ProviderInterface
from odds_mcp.schemas import FetchPlayerPropsInput, FetchSportsOddsInput
from odds_mcp.schemas.tools import ToolInput
from odds_mcp.services.metrics import metrics_service
from odds_mcp.tools.odds import fetch_sports_odds
from odds_mcp.tools.props import PlayerPropsPipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    title: str
    description: str
    input_model: type[ToolInput]

    def to_mcp_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=self.input_model.model_json_schema(),
        )


FETCH_SPORTS_ODDS = ToolDefinition(
    name="fetch_sports_odds",
    title="Sports Odds Fetcher",
    description=(
        "Fetches sports odds from The Odds API. Gets all current games for a specified sport "
        "with odds from US bookmakers."
    ),
    input_model=FetchSportsOddsInput,
)

FETCH_PLAYER_PROPS = ToolDefinition(
    name="fetch_player_props",
    title="Player Props Fetcher",
    description=(
        "Fetches player props for specific MLB or WNBA games from DraftKings "
        "using the event-specific odds endpoint"
    ),
    input_model=FetchPlayerPropsInput,
)


def _describe_validation_error(error: ValidationError) -> tuple[str, str | None]:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    return first["msg"], field


class ToolRegistry:
    """The two odds tools, their input contracts and handlers."""

    def __init__(
        self,
        provider: ProviderInterface,
        *,
        props_pipeline: PlayerPropsPipeline | None = None,
        tz: tzinfo | None = None,
        server_name: str = "odds-api-mcp-server",
        server_version: str = "1.0.0",
    ):
        self.provider = provider
        self.tz = tz
        self.props_pipeline = props_pipeline or PlayerPropsPipeline(provider, tz=tz)
        self.server_name = server_name
        self.server_version = server_version

        self._definitions = {d.name: d for d in (FETCH_SPORTS_ODDS, FETCH_PLAYER_PROPS)}
        self._handlers: dict[str, Callable[[Any], Awaitable[str]]] = {
            FETCH_SPORTS_ODDS.name: self._fetch_sports_odds,
            FETCH_PLAYER_PROPS.name: self._fetch_player_props,
        }

    @classmethod
    def from_settings(cls, provider: ProviderInterface, settings: Settings) -> "ToolRegistry":
        tz = settings.display_tz
        pipeline = PlayerPropsPipeline(
            provider,
            bookmaker=settings.props_bookmaker,
            bookmaker_title=settings.props_bookmaker_title,
            region=settings.props_region,
            concurrency=settings.props_fetch_concurrency,
            tz=tz,
        )
        return cls(
            provider,
            props_pipeline=pipeline,
            tz=tz,
            server_name=settings.server_name,
            server_version=settings.server_version,
        )

    @property
    def definitions(self) -> list[ToolDefinition]:
        return list(self._definitions.values())

    def list_tools(self) -> list[types.Tool]:
        return [d.to_mcp_tool() for d in self._definitions.values()]

    def validate(self, name: str, arguments: dict[str, Any] | None) -> ToolInput:
        """Check arguments against the tool's input model and fill defaults."""
        definition = self._definitions.get(name)
        if definition is None:
            raise InvalidArgumentError(f"Unknown tool: {name}", field="name", value=name)
        try:
            return definition.input_model.model_validate(arguments or {})
        except ValidationError as e:
            msg, field = _describe_validation_error(e)
            raise InvalidArgumentError(f"Invalid arguments for {name}: {field}: {msg}", field=field)

    async def call(self, name: str, arguments: dict[str, Any] | None) -> str:
        """Run a tool and return its text report.

        Raises:
            InvalidArgumentError: before any provider call
            ToolExecutionError: when the provider fails
        """
        await metrics_service.track_tool_call()
        try:
            params = self.validate(name, arguments)
        except InvalidArgumentError as e:
            await metrics_service.track_tool_error()
            logger.info(f"Rejected {name} call: {e.message}")
            raise

        try:
            return await self._handlers[name](params)
        except ProviderError as e:
            await metrics_service.track_tool_error()
            logger.error(f"Error executing tool {name}: {e.message} - {e.details}")
            raise ToolExecutionError(name, e.message, status_code=e.status_code)

    async def _fetch_sports_odds(self, params: FetchSportsOddsInput) -> str:
        return await fetch_sports_odds(self.provider, params, tz=self.tz)

    async def _fetch_player_props(self, params: FetchPlayerPropsInput) -> str:
        return await self.props_pipeline.run(params)

    def build_server(self) -> Server:
        """Create a fresh MCP protocol server bound to this registry."""
        server = Server(self.server_name, version=self.server_version)

        @server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return self.list_tools()

        @server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
            text = await self.call(name, arguments)
            return [types.TextContent(type="text", text=text)]

        return server
