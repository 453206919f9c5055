from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config import Settings, get_settings
from db.session import get_session
from integrations.api_football import ApiFootballClient
from integrations.circuit_breaker import CircuitBreaker
from services.fixture_sync import FixtureSyncService


def get_feed_client(request: Request) -> ApiFootballClient:
    return request.app.state.feed_client


def get_feed_breaker(request: Request) -> CircuitBreaker:
    return request.app.state.feed_breaker


def get_fixture_sync(
    session: AsyncSession = Depends(get_session),
    client: ApiFootballClient = Depends(get_feed_client),
    breaker: CircuitBreaker = Depends(get_feed_breaker),
    settings: Settings = Depends(get_settings),
) -> FixtureSyncService:
    return FixtureSyncService(session, client, breaker, settings)
