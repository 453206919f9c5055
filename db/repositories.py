"""Match and prediction persistence on top of an injected ``AsyncSession``."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateError, NotFoundError
from db.models import Match, Prediction, User

logger = logging.getLogger(__name__)


class MatchRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def exists(self, home_team: str, away_team: str, date: str) -> bool:
        stmt = select(Match.id).where(
            Match.home_team == home_team,
            Match.away_team == away_team,
            Match.date == date,
        )
        return (await self.session.execute(stmt.limit(1))).first() is not None

    async def add(self, match: Match) -> Match:
        """Insert and commit a single match.

        Raises ``DuplicateError`` when the natural-key constraint rejects it.
        """
        self.session.add(match)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateError(
                f"Match {match.home_team} vs {match.away_team} on {match.date} already exists"
            ) from exc
        return match

    async def get(self, match_id: uuid.UUID) -> Match | None:
        return await self.session.get(Match, match_id)

    async def list_all(self) -> list[Match]:
        result = await self.session.execute(select(Match).order_by(Match.date.asc()))
        return list(result.scalars().all())

    async def list_for_matchday(self, match_day: int) -> list[Match]:
        stmt = select(Match).where(Match.match_day == match_day).order_by(Match.date.asc())
        return list((await self.session.execute(stmt)).scalars().all())

    async def prediction_count(self, match_id: uuid.UUID) -> int:
        stmt = select(func.count(Prediction.id)).where(Prediction.match_id == match_id)
        return (await self.session.execute(stmt)).scalar_one()


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Tell a uniqueness collision apart from a foreign-key or NOT NULL failure."""
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate key" in message


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def exists(self, user_id: uuid.UUID) -> bool:
        stmt = select(User.id).where(User.id == user_id).limit(1)
        return (await self.session.execute(stmt)).first() is not None


@dataclass
class UserPredictionRow:
    prediction: Prediction
    home_team: str
    away_team: str
    date: str
    result: str


class PredictionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_for_user_and_match(
        self, user_id: uuid.UUID, match_id: uuid.UUID
    ) -> Prediction | None:
        stmt = select(Prediction).where(
            Prediction.user_id == user_id, Prediction.match_id == match_id
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def get_owned(self, prediction_id: uuid.UUID, user_id: uuid.UUID) -> Prediction | None:
        stmt = select(Prediction).where(
            Prediction.id == prediction_id, Prediction.user_id == user_id
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def add(self, prediction: Prediction) -> Prediction:
        self.session.add(prediction)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if _is_unique_violation(exc):
                raise DuplicateError("Prediction already exists for this match") from exc
            # The user or match row vanished between lookup and insert.
            raise NotFoundError("User or match not found") from exc
        return prediction

    async def save(self, prediction: Prediction) -> Prediction:
        await self.session.commit()
        return prediction

    async def list_for_user(self, user_id: uuid.UUID) -> list[UserPredictionRow]:
        stmt = (
            select(Prediction, Match.home_team, Match.away_team, Match.date, Match.result)
            .join(Match, Match.id == Prediction.match_id)
            .where(Prediction.user_id == user_id)
            .order_by(Match.date.desc())
        )
        rows = (await self.session.execute(stmt)).all()
        return [UserPredictionRow(*row) for row in rows]
