"""Tests for the typer CLI."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from odds_mcp.cli import app
from odds_mcp.config import Settings
from odds_mcp.exceptions import ProviderHTTPError

runner = CliRunner()


@pytest.fixture
def cli_settings():
    config = Settings(odds_api_key="test_api_key", display_timezone="UTC")
    with patch("odds_mcp.cli.settings", config):
        yield config


def test_tools_lists_both_tools(cli_settings):
    result = runner.invoke(app, ["tools"])

    assert result.exit_code == 0
    assert "fetch_sports_odds" in result.output
    assert "fetch_player_props" in result.output


def test_serve_requires_api_key():
    with patch("odds_mcp.cli.settings", Settings(odds_api_key="")), patch("odds_mcp.cli.uvicorn") as mock_uvicorn:
        result = runner.invoke(app, ["serve"])

    assert result.exit_code == 1
    assert "ODDS_API_KEY" in result.output
    mock_uvicorn.run.assert_not_called()


def test_serve_runs_uvicorn(cli_settings):
    with patch("odds_mcp.cli.uvicorn") as mock_uvicorn:
        result = runner.invoke(app, ["serve", "--port", "9001"])

    assert result.exit_code == 0
    mock_uvicorn.run.assert_called_once()
    assert mock_uvicorn.run.call_args.kwargs["port"] == 9001


def test_odds_prints_report(cli_settings, mock_provider, sample_game):
    mock_provider.fetch_odds.return_value = [sample_game]

    with patch("odds_mcp.cli.OddsAPIClient", return_value=mock_provider):
        result = runner.invoke(app, ["odds", "baseball_mlb", "-m", "h2h", "-m", "spreads"])

    assert result.exit_code == 0
    assert "Sports Odds Report - BASEBALL_MLB" in result.output
    assert "1. Boston Red Sox @ New York Yankees" in result.output
    mock_provider.fetch_odds.assert_awaited_once_with("baseball_mlb", ["h2h", "spreads"], "us")


def test_odds_rejects_unknown_sport(cli_settings, mock_provider):
    with patch("odds_mcp.cli.OddsAPIClient", return_value=mock_provider):
        result = runner.invoke(app, ["odds", "curling_world"])

    assert result.exit_code == 1
    assert "Invalid arguments for fetch_sports_odds" in result.output
    mock_provider.fetch_odds.assert_not_awaited()


def test_props_provider_failure(cli_settings, mock_provider):
    mock_provider.fetch_events.side_effect = ProviderHTTPError("HTTP 401 from The Odds API", status_code=401)

    with patch("odds_mcp.cli.OddsAPIClient", return_value=mock_provider):
        result = runner.invoke(app, ["props", "baseball_mlb", "--team", "Yankees"])

    assert result.exit_code == 1
    assert "Failed to execute fetch_player_props" in result.output
