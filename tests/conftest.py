"""Shared pytest fixtures for hr-odds-tracker tests."""
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncGenerator, Generator

# Settings are read at import time; keep the app away from Postgres and cron
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_JSON"] = "false"

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool
from tenacity import wait_none

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from hr_odds.core.config import Settings
from hr_odds.core.database import Database
from hr_odds.models import Game, GameParticipant, OddsHistorySample, OddsQuote, Player, Team
from hr_odds.services.odds_api_client import OddsApiClient

BASE_URL = "https://odds.test/v4"

# 2025-07-16 12:00 EDT
NOON_ET = datetime(2025, 7, 16, 16, 0, tzinfo=timezone.utc)

EVENTS_PAYLOAD = [
    {
        "id": "evt-bos-nyy",
        "sport_key": "baseball_mlb",
        "commence_time": "2025-07-16T23:05:00Z",
        "home_team": "New York Yankees",
        "away_team": "Boston Red Sox",
    },
    {
        # 10:10 PM EDT on the 16th, already the 17th in UTC
        "id": "evt-sf-lad",
        "sport_key": "baseball_mlb",
        "commence_time": "2025-07-17T02:10:00Z",
        "home_team": "Los Angeles Dodgers",
        "away_team": "San Francisco Giants",
    },
]

ODDS_PAYLOAD = [
    {
        "id": "evt-bos-nyy",
        "sport_key": "baseball_mlb",
        "commence_time": "2025-07-16T23:05:00Z",
        "home_team": "New York Yankees",
        "away_team": "Boston Red Sox",
        "bookmakers": [
            {
                "key": "fanduel",
                "title": "FanDuel",
                "markets": [
                    {
                        "key": "player_home_run",
                        "outcomes": [
                            {"name": "Yes", "description": "Aaron Judge", "price": 250},
                            {"name": "No", "description": "Aaron Judge", "price": -350},
                            {"name": "Yes", "description": "Rafael Devers", "price": 410},
                        ],
                    }
                ],
            },
            {
                "key": "BetMGM",
                "title": "BetMGM",
                "markets": [
                    {
                        "key": "player_home_run",
                        "outcomes": [{"name": "Yes", "description": "Aaron Judge", "price": 240}],
                    },
                    {
                        "key": "batter_hits",
                        "outcomes": [{"name": "Over", "description": "Aaron Judge", "price": -150, "point": 0.5}],
                    },
                ],
            },
            {
                "key": "draftkings",
                "title": "DraftKings",
                "markets": [
                    {
                        "key": "player_home_run",
                        "outcomes": [{"name": "Yes", "description": "Aaron Judge", "price": 260}],
                    }
                ],
            },
        ],
    }
]


class FakeOddsProvider:
    """
    Stand-in for The Odds API behind ``httpx.MockTransport``.

    Responses are keyed by the last path segment (``events`` / ``odds``);
    anything unregistered answers 404.
    """

    def __init__(self):
        self.responses = {}
        self.requests = []

    def respond(self, endpoint: str, payload, status: int = 200, headers=None):
        self.responses[endpoint] = (status, payload, headers or {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        if endpoint not in self.responses:
            return httpx.Response(404, json={"message": "Unknown endpoint"})
        status, payload, headers = self.responses[endpoint]
        return httpx.Response(status, json=payload, headers=headers)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL="sqlite://",
        THE_ODDS_API_KEY="test-key",
        ODDS_API_BASE_URL=BASE_URL,
        REFRESH_TOKEN="",
        SCHEDULER_ENABLED=False,
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def database() -> Generator[Database, None, None]:
    """Isolated in-memory database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine=engine)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database: Database) -> Generator[Session, None, None]:
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def provider() -> FakeOddsProvider:
    return FakeOddsProvider()


@pytest.fixture
async def odds_client(provider: FakeOddsProvider) -> AsyncGenerator[OddsApiClient, None]:
    client = OddsApiClient(
        api_key="test-key",
        base_url=BASE_URL,
        transport=httpx.MockTransport(provider.handler),
        retry_wait=wait_none(),
    )
    yield client
    await client.close()


@pytest.fixture
async def async_client(database, odds_client, test_settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with store, provider and settings overridden."""
    from hr_odds.api.deps import get_odds_client, get_settings
    from hr_odds.core.database import get_database
    from hr_odds.main import app

    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_odds_client] = lambda: odds_client
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ----------------------------------------------------------------------------
# Store seeding helpers
# ----------------------------------------------------------------------------

def seed_game(session: Session, game_id: str, commence_time: datetime, home: str = "NYY", away: str = "BOS") -> Game:
    from hr_odds.utils.timezone import eastern_date

    for abbr in (home, away):
        if session.get(Team, abbr) is None:
            session.add(Team(abbr=abbr, team_id=abbr))
    game = Game(
        game_id=game_id,
        sport_key="baseball_mlb",
        game_date=eastern_date(commence_time),
        commence_time=commence_time,
        home_team=home,
        away_team=away,
    )
    session.add(game)
    session.commit()
    return game


def seed_player(session: Session, player_id: str, team_abbr=None, full_name=None) -> Player:
    player = Player(player_id=player_id, full_name=full_name or player_id, team_abbr=team_abbr)
    session.add(player)
    session.commit()
    return player


def seed_quote(
    session: Session,
    game_id: str,
    player_id: str,
    captured_at: datetime,
    bookmaker: str = "fanduel",
    american_odds: int = 300,
    history_samples: int = 1,
) -> None:
    """One live quote, ``history_samples`` history rows and the participant row."""
    fields = dict(
        market_key="player_home_run",
        player_id=player_id,
        game_id=game_id,
        bookmaker=bookmaker,
        american_odds=american_odds,
        decimal_odds=1 + american_odds / 100,
    )
    session.add(OddsQuote(captured_at=captured_at, **fields))
    for i in range(history_samples):
        session.add(OddsHistorySample(captured_at=captured_at + timedelta(minutes=i), **fields))
    if session.query(GameParticipant).filter_by(game_id=game_id, player_id=player_id).first() is None:
        session.add(GameParticipant(game_id=game_id, player_id=player_id, team_abbr=None))
    session.commit()
