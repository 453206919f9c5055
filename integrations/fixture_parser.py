"""
Translate api-football ``/fixtures`` payloads into ``FixtureRecord``s.

Only the fields the game needs are modelled.  Each fixture is validated on its
own: a defective fixture raises ``RecordParseError`` and is dropped by
``parse_fixtures`` while the remaining fixtures are kept.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from core.exceptions import RecordParseError

logger = logging.getLogger(__name__)

KICKOFF_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
# RFC 3339: optional fractional seconds, offset is "Z" or "+hh:mm".
_RFC3339_RE = re.compile(
    r"([0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2})(?:\.[0-9]+)?(Z|[+-][0-9]{2}:[0-9]{2})"
)
UNPLAYED_RESULT = "0:0"

# Tried in order, first match wins.
MATCHDAY_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"Regular Season - ([+-]?\d+)"),
    re.compile(r"Matchday ([+-]?\d+)"),
)


# ── Provider payload ──────────────────────────────────────────────────────────

class _Fixture(BaseModel):
    id: Optional[int] = None
    date: str


class _League(BaseModel):
    round: Optional[str] = None


class _Team(BaseModel):
    name: str


class _Teams(BaseModel):
    home: _Team
    away: _Team


class _Fulltime(BaseModel):
    home: Optional[int] = None
    away: Optional[int] = None


class _Score(BaseModel):
    fulltime: Optional[_Fulltime] = None


class ApiFixture(BaseModel):
    fixture: _Fixture
    league: Optional[_League] = None
    teams: _Teams
    score: Optional[_Score] = None


# ── Normalised record ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FixtureRecord:
    home_team: str
    away_team: str
    kickoff: str
    round_label: str
    match_day: int
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None
    fixture_id: Optional[int] = None

    @property
    def is_finished(self) -> bool:
        return self.home_goals is not None and self.away_goals is not None

    @property
    def result(self) -> str:
        if not self.is_finished:
            return UNPLAYED_RESULT
        return f"{self.home_goals}:{self.away_goals}"

    @property
    def natural_key(self) -> tuple[str, str, str]:
        return self.home_team, self.away_team, self.kickoff


# ── Field extraction ──────────────────────────────────────────────────────────

def parse_kickoff(value: str) -> str:
    """Parse an RFC 3339 feed timestamp and render it whole-second, ``Z`` for UTC."""
    m = _RFC3339_RE.fullmatch(value) if isinstance(value, str) else None
    if m is None:
        raise RecordParseError(f"unparseable kickoff {value!r}")
    base, offset = m.groups()
    try:
        parsed = datetime.strptime(base + offset, KICKOFF_FORMAT)
    except ValueError as exc:
        raise RecordParseError(f"unparseable kickoff {value!r}") from exc

    if parsed.utcoffset() == timedelta(0):
        return parsed.strftime("%Y-%m-%dT%H:%M:%SZ")
    return parsed.isoformat()


def extract_match_day(round_label: str | None) -> int:
    if not round_label:
        return 0
    for rule in MATCHDAY_RULES:
        m = rule.match(round_label)
        if m:
            return int(m.group(1))
    return 0


def parse_fixture(raw: Any) -> FixtureRecord:
    try:
        item = ApiFixture.model_validate(raw)
    except ValidationError as exc:
        fixture_id = None
        if isinstance(raw, dict) and isinstance(raw.get("fixture"), dict):
            fixture_id = raw["fixture"].get("id")
        raise RecordParseError(
            f"malformed fixture: {exc.error_count()} validation error(s)",
            fixture_id=fixture_id,
        ) from exc

    try:
        kickoff = parse_kickoff(item.fixture.date)
    except RecordParseError as exc:
        exc.fixture_id = item.fixture.id
        raise

    round_label = item.league.round if item.league else None
    fulltime = item.score.fulltime if item.score else None
    return FixtureRecord(
        home_team=item.teams.home.name,
        away_team=item.teams.away.name,
        kickoff=kickoff,
        round_label=round_label or "",
        match_day=extract_match_day(round_label),
        home_goals=fulltime.home if fulltime else None,
        away_goals=fulltime.away if fulltime else None,
        fixture_id=item.fixture.id,
    )


def parse_fixtures(items: list[Any]) -> list[FixtureRecord]:
    records: list[FixtureRecord] = []
    for raw in items:
        try:
            records.append(parse_fixture(raw))
        except RecordParseError as exc:
            logger.warning(
                "Dropping fixture: %s",
                exc,
                extra={"fixture_id": exc.fixture_id},
            )
    if len(records) != len(items):
        logger.info("Parsed %d of %d fixtures", len(records), len(items))
    return records
