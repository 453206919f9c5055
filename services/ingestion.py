"""
Fixture ingestion.

Reconciles fetched ``FixtureRecord``s with the stored matches.  A record is
already stored when a match has exactly the same home team, away team and
kickoff string.  Existing matches are never modified, so replaying an
unchanged feed inserts nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import DuplicateError
from db.models import Match
from db.repositories import MatchRepository
from integrations.fixture_parser import FixtureRecord

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    inserted: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.skipped + self.failed


class FixtureIngestor:
    def __init__(self, matches: MatchRepository, league: str, season: str) -> None:
        self.matches = matches
        self.league = league
        self.season = season

    def _to_match(self, record: FixtureRecord) -> Match:
        return Match(
            home_team=record.home_team,
            away_team=record.away_team,
            date=record.kickoff,
            league=self.league,
            season=self.season,
            match_day=record.match_day,
            result=record.result,
        )

    async def ingest(self, records: Iterable[FixtureRecord]) -> IngestResult:
        outcome = IngestResult()

        for record in records:
            if await self.matches.exists(*record.natural_key):
                outcome.skipped += 1
                continue

            try:
                await self.matches.add(self._to_match(record))
            except DuplicateError:
                # Lost an insert race; the row is there either way.
                outcome.skipped += 1
                continue
            except SQLAlchemyError:
                logger.exception(
                    "Failed to store match %s vs %s",
                    record.home_team,
                    record.away_team,
                    extra={"kickoff": record.kickoff, "fixture_id": record.fixture_id},
                )
                await self.matches.session.rollback()
                outcome.failed += 1
                continue
            outcome.inserted += 1

        logger.info(
            "Matches processed: %d new, %d skipped, %d failed",
            outcome.inserted,
            outcome.skipped,
            outcome.failed,
        )
        return outcome
