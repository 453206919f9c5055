import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateError, NotFoundError, ValidationError
from db.models import Prediction
from db.repositories import MatchRepository, PredictionRepository, UserPredictionRow, UserRepository
from engine.scoring import score

logger = logging.getLogger(__name__)


def _validate_scores(home: int, away: int) -> None:
    if home < 0 or away < 0:
        raise ValidationError("Predicted scores must be non-negative")


class PredictionService:
    def __init__(self, session: AsyncSession) -> None:
        self.users = UserRepository(session)
        self.matches = MatchRepository(session)
        self.predictions = PredictionRepository(session)

    async def create(
        self, user_id: uuid.UUID, match_id: uuid.UUID, home: int, away: int
    ) -> Prediction:
        _validate_scores(home, away)

        # Early conflict; the unique constraint is what actually guarantees it.
        if await self.predictions.get_for_user_and_match(user_id, match_id) is not None:
            raise DuplicateError("Prediction already exists for this match")

        if not await self.users.exists(user_id):
            raise NotFoundError("User not found")

        match = await self.matches.get(match_id)
        if match is None:
            raise NotFoundError("Match not found")

        prediction = Prediction(
            user_id=user_id,
            match_id=match_id,
            predicted_score_home=home,
            predicted_score_away=away,
            points=score(home, away, match.result),
        )
        await self.predictions.add(prediction)
        logger.info(
            "Prediction created",
            extra={"user_id": str(user_id), "match_id": str(match_id), "points": prediction.points},
        )
        return prediction

    async def update(
        self, user_id: uuid.UUID, prediction_id: uuid.UUID, home: int, away: int
    ) -> Prediction:
        _validate_scores(home, away)

        prediction = await self.predictions.get_owned(prediction_id, user_id)
        if prediction is None:
            raise NotFoundError("Prediction not found")

        match = await self.matches.get(prediction.match_id)
        if match is None:
            raise NotFoundError("Match not found")

        prediction.predicted_score_home = home
        prediction.predicted_score_away = away
        prediction.points = score(home, away, match.result)
        return await self.predictions.save(prediction)

    async def get_for_match(self, user_id: uuid.UUID, match_id: uuid.UUID) -> Prediction:
        prediction = await self.predictions.get_for_user_and_match(user_id, match_id)
        if prediction is None:
            raise NotFoundError("Prediction not found")
        return prediction

    async def list_for_user(self, user_id: uuid.UUID) -> list[UserPredictionRow]:
        return await self.predictions.list_for_user(user_id)
