"""Command line interface for the odds MCP server.

Usage:
    python -m odds_mcp.cli serve --port 10000
    python -m odds_mcp.cli tools
    python -m odds_mcp.cli odds baseball_mlb --market h2h --market spreads
    python -m odds_mcp.cli props basketball_wnba --team Liberty
"""

import asyncio
from typing import Any

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from odds_mcp.config import settings
from odds_mcp.exceptions import OddsMcpError
from odds_mcp.services.odds_client import OddsAPIClient
from odds_mcp.tools.registry import FETCH_PLAYER_PROPS, FETCH_SPORTS_ODDS, ToolRegistry

app = typer.Typer(help="Odds API MCP server")
console = Console()


def _require_api_key() -> None:
    try:
        settings.require_odds_api_key()
    except OddsMcpError as e:
        console.print(f"\n[red]✗[/red] {e.message}\n")
        raise typer.Exit(code=1)


def _run_tool(name: str, arguments: dict[str, Any]) -> None:
    _require_api_key()
    registry = ToolRegistry.from_settings(OddsAPIClient(), settings)
    try:
        report = asyncio.run(registry.call(name, arguments))
    except OddsMcpError as e:
        console.print(f"\n[red]✗[/red] {e.message}\n")
        raise typer.Exit(code=1)
    console.print(report, markup=False, highlight=False)


@app.command("serve")
def serve(
    host: str = typer.Option(settings.host, "--host", help="Interface to bind"),
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to listen on"),
):
    """Run the HTTP MCP server."""
    _require_api_key()
    console.print(f"\n[green]✓[/green] Serving MCP on [cyan]http://{host}:{port}/mcp[/cyan]\n")
    uvicorn.run(
        "odds_mcp.main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_timeout_seconds,
    )


@app.command("tools")
def list_tools():
    """List the tools exposed over MCP."""
    registry = ToolRegistry.from_settings(OddsAPIClient(), settings)

    table = Table(title="MCP Tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Title", style="green")
    table.add_column("Arguments", style="magenta")
    table.add_column("Description")

    for definition in registry.definitions:
        arguments = ", ".join(definition.input_model.model_fields)
        table.add_row(definition.name, definition.title, arguments, definition.description)

    console.print()
    console.print(table)
    console.print()


@app.command("odds")
def odds(
    sport: str = typer.Argument(..., help="Sport key, e.g. baseball_mlb"),
    markets: list[str] = typer.Option(None, "--market", "-m", help="Market key (repeatable)"),
    regions: str = typer.Option(None, "--regions", "-r", help="Bookmaker regions, e.g. us"),
):
    """Fetch current odds for a sport and print the report."""
    arguments: dict[str, Any] = {"sport": sport}
    if markets:
        arguments["markets"] = markets
    if regions:
        arguments["regions"] = regions
    _run_tool(FETCH_SPORTS_ODDS.name, arguments)


@app.command("props")
def props(
    sport: str = typer.Argument(..., help="Sport key, baseball_mlb or basketball_wnba"),
    markets: list[str] = typer.Option(None, "--market", "-m", help="Prop market key (repeatable)"),
    team: str = typer.Option(None, "--team", "-t", help="Only games involving this team"),
):
    """Fetch player props for upcoming games and print the report."""
    arguments: dict[str, Any] = {"sport": sport}
    if markets:
        arguments["markets"] = markets
    if team:
        arguments["team_filter"] = team
    _run_tool(FETCH_PLAYER_PROPS.name, arguments)


if __name__ == "__main__":
    app()
