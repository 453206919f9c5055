import logging

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from config import Settings
from core.exceptions import FeedError
from db.repositories import MatchRepository
from integrations.api_football import ApiFootballClient
from integrations.circuit_breaker import CircuitBreaker
from services.ingestion import FixtureIngestor, IngestResult

logger = logging.getLogger(__name__)


class FixtureSyncService:
    """Pulls the configured league/season from the feed into the match store."""

    def __init__(
        self,
        session: AsyncSession,
        client: ApiFootballClient,
        breaker: CircuitBreaker,
        settings: Settings,
    ) -> None:
        self.client = client
        self.breaker = breaker
        self.settings = settings
        self.ingestor = FixtureIngestor(
            MatchRepository(session),
            league=settings.league_name,
            season=settings.season,
        )

    async def sync(self) -> IngestResult:
        """Fetch and ingest; raises ``FeedError`` when the feed is unusable."""
        records = await run_in_threadpool(
            self.breaker.call,
            self.client.fetch_fixtures,
            self.settings.league_id,
            self.settings.season,
        )
        return await self.ingestor.ingest(records)

    async def sync_soft(self) -> IngestResult | None:
        """Like ``sync`` but a feed failure only logs; stored matches still serve."""
        try:
            return await self.sync()
        except FeedError as exc:
            logger.warning("Failed to fetch latest matches from API: %s", exc.message)
            return None
