"""Tests for the plain-text tool reports."""

from datetime import datetime, timedelta, timezone

from odds_mcp.schemas import EventOddsResult, Game
from odds_mcp.services.report import (
    format_number,
    format_time,
    market_title,
    render_odds_report,
    render_props_report,
)


def test_format_number_drops_trailing_zero():
    assert format_number(2.0) == "2"
    assert format_number(1.65) == "1.65"
    assert format_number(-1.5) == "-1.5"
    assert format_number(0.0) == "0"


def test_format_time_in_display_zone():
    moment = datetime(2026, 7, 4, 23, 5, tzinfo=timezone.utc)

    assert format_time(moment) == "2026-07-04 11:05 PM UTC"
    assert format_time(moment, timezone(timedelta(hours=-4), "EDT")) == "2026-07-04 07:05 PM EDT"


def test_format_time_treats_naive_as_utc():
    assert format_time(datetime(2026, 1, 2, 9, 0)) == "2026-01-02 09:00 AM UTC"


def test_market_title():
    assert market_title("batter_home_runs") == "BATTER HOME RUNS"
    assert market_title("h2h") == "H2H"


def test_odds_report_full(sample_game, generated_at):
    """Test the complete layout for one game with two markets."""
    report = render_odds_report(
        "baseball_mlb", ["h2h", "spreads"], "us", [sample_game], generated_at=generated_at
    )

    assert report == (
        "Sports Odds Report - BASEBALL_MLB\n"
        "Generated: 2026-07-04 06:30 PM UTC\n"
        "Markets: h2h, spreads\n"
        "Regions: us\n"
        "\n"
        "Found 1 games:\n"
        "\n"
        "1. Boston Red Sox @ New York Yankees\n"
        "   Starts: 2026-07-04 11:05 PM UTC\n"
        "   DraftKings:\n"
        "     h2h: Boston Red Sox (2.3), New York Yankees (1.65)\n"
        "     spreads: Boston Red Sox (1.95) 1.5, New York Yankees (1.87) -1.5\n"
        "\n"
    )


def test_odds_report_empty(generated_at):
    """Test no games renders the header and a single notice."""
    report = render_odds_report("icehockey_nhl", ["h2h"], "us", [], generated_at=generated_at)

    assert report.splitlines() == [
        "Sports Odds Report - ICEHOCKEY_NHL",
        "Generated: 2026-07-04 06:30 PM UTC",
        "Markets: h2h",
        "Regions: us",
        "",
        "No games found for this sport.",
    ]


def test_odds_report_missing_data(sample_game_data, generated_at):
    """Test games, bookmakers and markets without data still render a line."""
    no_books = Game.model_validate({**sample_game_data, "id": "a", "bookmakers": []})
    empty_book = Game.model_validate(
        {**sample_game_data, "id": "b", "bookmakers": [{"key": "fanduel", "title": "FanDuel"}]}
    )
    empty_market = Game.model_validate(
        {
            **sample_game_data,
            "id": "c",
            "bookmakers": [{"key": "fanduel", "title": "FanDuel", "markets": [{"key": "totals"}]}],
        }
    )

    report = render_odds_report(
        "baseball_mlb", ["h2h"], "us", [no_books, empty_book, empty_market], generated_at=generated_at
    )

    assert "Found 3 games:" in report
    assert "   No bookmaker data available for this game\n" in report
    assert "   FanDuel:\n     no data available\n" in report
    assert "     totals: no data available\n" in report


def test_odds_report_renders_zero_point(sample_game_data, generated_at):
    data = {
        **sample_game_data,
        "bookmakers": [
            {
                "key": "draftkings",
                "title": "DraftKings",
                "markets": [{"key": "spreads", "outcomes": [{"name": "Boston Red Sox", "price": 1.91, "point": 0}]}],
            }
        ],
    }
    report = render_odds_report(
        "baseball_mlb", ["spreads"], "us", [Game.model_validate(data)], generated_at=generated_at
    )

    assert "spreads: Boston Red Sox (1.91) 0\n" in report


def test_odds_report_only_generated_line_differs(sample_game):
    """Test rendering is deterministic apart from the timestamp."""
    first = render_odds_report("baseball_mlb", ["h2h"], "us", [sample_game])
    later = render_odds_report(
        "baseball_mlb",
        ["h2h"],
        "us",
        [sample_game],
        generated_at=datetime.now(timezone.utc) + timedelta(hours=3),
    )

    def strip(report: str) -> list[str]:
        return [line for line in report.splitlines() if not line.startswith("Generated:")]

    assert strip(first) == strip(later)


def test_props_report_full(sample_events, make_props_result, generated_at):
    event = sample_events[0]
    report = render_props_report(
        "baseball_mlb",
        ["batter_home_runs"],
        "yankees",
        [make_props_result(event)],
        generated_at=generated_at,
    )

    assert report == (
        "Player Props Report - BASEBALL_MLB\n"
        "Generated: 2026-07-04 06:30 PM UTC\n"
        "Markets: batter_home_runs\n"
        "Team Filter: yankees\n"
        "\n"
        "Processing 1 games:\n"
        "\n"
        "--- Boston Red Sox @ New York Yankees ---\n"
        "Starts: 2026-07-04 11:05 PM UTC\n"
        "\n"
        "BATTER HOME RUNS:\n"
        "  Aaron Judge: Over 0.5 (3.4)\n"
        "\n"
    )


def test_props_report_empty_with_and_without_filter(generated_at):
    filtered = render_props_report("baseball_mlb", ["batter_home_runs"], "Expos", [], generated_at=generated_at)
    unfiltered = render_props_report("baseball_mlb", ["batter_home_runs"], None, [], generated_at=generated_at)

    assert filtered.endswith('Team Filter: Expos\n\nNo games found for team "Expos" today.\n')
    assert "Team Filter" not in unfiltered
    assert unfiltered.endswith("No games found for this sport today.\n")


def test_props_report_failed_event_inline(sample_events, make_props_result, generated_at):
    """Test a failed event renders its error between successful siblings."""
    results = [
        make_props_result(sample_events[0]),
        EventOddsResult(event=sample_events[1], status_code=404, error="Unable to fetch props (404)"),
        make_props_result(sample_events[2], player="Shohei Ohtani"),
    ]

    report = render_props_report("baseball_mlb", ["batter_home_runs"], None, results, generated_at=generated_at)

    assert "Processing 3 games:" in report
    assert "--- Toronto Blue Jays @ Tampa Bay Rays ---\nError: Unable to fetch props (404)\n" in report
    assert report.index("Aaron Judge") < report.index("Unable to fetch props") < report.index("Shohei Ohtani")


def test_props_report_missing_bookmaker(sample_events, generated_at):
    event = sample_events[0]
    no_books = EventOddsResult(event=event, game=event)
    other_book = EventOddsResult(
        event=event,
        game=Game.model_validate(
            {**event.model_dump(), "bookmakers": [{"key": "fanduel", "title": "FanDuel", "markets": []}]}
        ),
    )

    report = render_props_report(
        "baseball_mlb", ["batter_home_runs"], None, [no_books, other_book], generated_at=generated_at
    )

    assert "No bookmaker data available for this game\n" in report
    assert "No DraftKings props available for this game\n" in report


def test_props_report_outcome_without_player(sample_events, generated_at):
    """Test outcomes without a description fall back to the outcome name."""
    event = sample_events[0]
    game = Game.model_validate(
        {
            **event.model_dump(),
            "bookmakers": [
                {
                    "key": "draftkings",
                    "title": "DraftKings",
                    "markets": [
                        {"key": "pitcher_strikeouts", "outcomes": [{"name": "Gerrit Cole", "price": 1.8}]},
                        {"key": "batter_hits", "outcomes": []},
                    ],
                }
            ],
        }
    )

    report = render_props_report(
        "baseball_mlb",
        ["pitcher_strikeouts", "batter_hits"],
        None,
        [EventOddsResult(event=event, game=game)],
        generated_at=generated_at,
    )

    assert "PITCHER STRIKEOUTS:\n  Gerrit Cole: Gerrit Cole (1.8)\n" in report
    assert "BATTER HITS:\n  No data available\n" in report
