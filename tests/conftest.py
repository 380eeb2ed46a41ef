"""Global fixtures for odds-mcp-server tests."""

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.responses import JSONResponse

from odds_mcp.config import Settings
from odds_mcp.main import create_app
from odds_mcp.providers.base import ProviderInterface
from odds_mcp.schemas import EventOddsResult, Game
from odds_mcp.sessions.manager import SessionManager


@pytest.fixture
def generated_at() -> datetime:
    return datetime(2026, 7, 4, 18, 30, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeTransport:
    """Stands in for SessionTransport; answers every request with its own identity."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.on_close = None
        self.server = None
        self.requests: list[tuple[str, bytes]] = []
        self.closed = False

    @property
    def is_closed(self) -> bool:
        return self.closed

    async def start(self, server) -> None:
        self.server = server

    async def handle_request(self, scope, receive, send) -> None:
        message = await receive()
        self.requests.append((scope["method"], message.get("body", b"")))
        response = JSONResponse(
            {"jsonrpc": "2.0", "id": 1, "result": {"transport": id(self)}},
            headers={"mcp-session-id": self.session_id},
        )
        await response(scope, receive, send)

    async def close(self) -> None:
        self.closed = True
        if self.on_close is not None:
            self.on_close()


@pytest.fixture
def transports() -> list[FakeTransport]:
    """Every FakeTransport created by transport_factory, in order."""
    return []


@pytest.fixture
def transport_factory(transports):
    def factory(session_id: str) -> FakeTransport:
        transport = FakeTransport(session_id)
        transports.append(transport)
        return transport

    return factory


@pytest.fixture
def session_manager(transport_factory) -> SessionManager:
    return SessionManager(lambda: MagicMock(name="server"), transport_factory=transport_factory)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(odds_api_key="test_api_key", display_timezone="UTC")


@pytest.fixture
def mock_provider() -> MagicMock:
    """Provider with async fetch methods and empty results by default."""
    provider = MagicMock(spec=ProviderInterface)
    provider.fetch_odds = AsyncMock(return_value=[])
    provider.fetch_events = AsyncMock(return_value=[])
    provider.fetch_event_odds = AsyncMock()
    return provider


@pytest_asyncio.fixture
async def test_client(test_settings, mock_provider, session_manager):
    """Async test client for the FastAPI app, backed by fake transports."""
    app = create_app(test_settings, provider=mock_provider, session_manager=session_manager)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_game_data() -> dict[str, Any]:
    """Game payload as returned by /sports/{sport}/odds."""
    return {
        "id": "evt_yankees_redsox",
        "sport_key": "baseball_mlb",
        "sport_title": "MLB",
        "commence_time": "2026-07-04T23:05:00Z",
        "home_team": "New York Yankees",
        "away_team": "Boston Red Sox",
        "bookmakers": [
            {
                "key": "draftkings",
                "title": "DraftKings",
                "last_update": "2026-07-04T18:00:00Z",
                "markets": [
                    {
                        "key": "h2h",
                        "outcomes": [
                            {"name": "Boston Red Sox", "price": 2.3},
                            {"name": "New York Yankees", "price": 1.65},
                        ],
                    },
                    {
                        "key": "spreads",
                        "outcomes": [
                            {"name": "Boston Red Sox", "price": 1.95, "point": 1.5},
                            {"name": "New York Yankees", "price": 1.87, "point": -1.5},
                        ],
                    },
                ],
            }
        ],
    }


@pytest.fixture
def sample_game(sample_game_data) -> Game:
    return Game.model_validate(sample_game_data)


def make_event(event_id: str, away: str, home: str) -> Game:
    return Game(
        id=event_id,
        sport_key="baseball_mlb",
        commence_time=datetime(2026, 7, 4, 23, 5, tzinfo=timezone.utc),
        home_team=home,
        away_team=away,
    )


@pytest.fixture
def sample_events() -> list[Game]:
    """Five MLB events in provider order."""
    return [
        make_event("evt_1", "Boston Red Sox", "New York Yankees"),
        make_event("evt_2", "Toronto Blue Jays", "Tampa Bay Rays"),
        make_event("evt_3", "Los Angeles Dodgers", "San Francisco Giants"),
        make_event("evt_4", "Chicago Cubs", "St. Louis Cardinals"),
        make_event("evt_5", "New York Mets", "Atlanta Braves"),
    ]


def props_game(event: Game, player: str = "Aaron Judge") -> Game:
    """The event with a DraftKings home run market."""
    return Game.model_validate(
        {
            **event.model_dump(),
            "bookmakers": [
                {
                    "key": "draftkings",
                    "title": "DraftKings",
                    "markets": [
                        {
                            "key": "batter_home_runs",
                            "outcomes": [
                                {"name": "Over", "description": player, "price": 3.4, "point": 0.5},
                            ],
                        }
                    ],
                }
            ]
        }
    )


def props_result(event: Game, player: str = "Aaron Judge") -> EventOddsResult:
    return EventOddsResult(event=event, game=props_game(event, player))


@pytest.fixture
def make_props_result():
    """Factory for successful per-event props results."""
    return props_result
