import uuid
from datetime import datetime, timedelta, timezone

import httpx
import jwt
import pytest
import pytest_asyncio

from config import Settings
from core.exceptions import FeedError
from db.models import Match, User
from db.session import init_models
from integrations.fixture_parser import parse_fixtures
from main import create_app

JWT_SECRET = "test-secret"


def make_fixture(
    home="Arsenal",
    away="Chelsea",
    date="2024-08-17T14:00:00+00:00",
    round_label="Regular Season - 1",
    goals=(None, None),
    fixture_id=1,
):
    return {
        "fixture": {"id": fixture_id, "date": date},
        "league": {"round": round_label},
        "teams": {"home": {"name": home}, "away": {"name": away}},
        "score": {"fulltime": {"home": goals[0], "away": goals[1]}},
    }


@pytest.fixture
def feed_payload():
    return {
        "response": [
            make_fixture("Manchester United", "Fulham", "2024-08-16T19:00:00+00:00", goals=(1, 0), fixture_id=1208021),
            make_fixture("Ipswich", "Liverpool", "2024-08-17T11:30:00+00:00", goals=(0, 2), fixture_id=1208022),
            make_fixture("Arsenal", "Wolves", "2024-08-17T14:00:00+00:00", round_label="Regular Season - 1", fixture_id=1208023),
            make_fixture("Everton", "Brighton", "2024-08-24T14:00:00+00:00", round_label="Regular Season - 2", fixture_id=1208030),
        ]
    }


class FakeFeedClient:
    """Stands in for ApiFootballClient; returns canned records or raises."""

    def __init__(self, payload=None, error=None):
        self.payload = payload or {"response": []}
        self.error = error
        self.calls = 0

    def fetch_fixtures(self, league_id, season):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return parse_fixtures(self.payload["response"])

    def close(self):
        pass


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        api_football_key="test-key",
        jwt_secret=JWT_SECRET,
        rate_limit="1000/minute",
        feed_failure_threshold=3,
    )


@pytest_asyncio.fixture
async def app(settings, feed_payload):
    application = create_app(settings)
    application.state.feed_client = FakeFeedClient(feed_payload)
    await init_models(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest.fixture
def sessionmaker(app):
    return app.state.sessionmaker


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def users(sessionmaker):
    alice = User(username="alice", email="alice@example.com")
    bob = User(username="bob", email="bob@example.com")
    async with sessionmaker() as session:
        session.add_all([alice, bob])
        await session.commit()
    return {"alice": alice, "bob": bob}


@pytest_asyncio.fixture
async def played_match(sessionmaker):
    match = Match(
        home_team="Arsenal",
        away_team="Chelsea",
        date="2024-09-01T15:30:00Z",
        league="Premier League",
        season="2024",
        match_day=3,
        result="2:1",
    )
    async with sessionmaker() as session:
        session.add(match)
        await session.commit()
    return match


@pytest_asyncio.fixture
async def upcoming_match(sessionmaker):
    match = Match(
        home_team="Liverpool",
        away_team="Everton",
        date="2025-05-10T14:00:00Z",
        league="Premier League",
        season="2024",
        match_day=36,
        result="0:0",
    )
    async with sessionmaker() as session:
        session.add(match)
        await session.commit()
    return match


def make_token(user_id, role=None, secret=JWT_SECRET, expires_in=timedelta(hours=1)):
    claims = {
        "user_id": str(user_id),
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    if role:
        claims["role"] = role
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_header(user_id, role=None):
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
def admin_headers():
    return auth_header(uuid.uuid4(), role="admin")


@pytest.fixture
def failing_feed():
    return FakeFeedClient(error=FeedError("fixture feed timed out after 30.0s"))
