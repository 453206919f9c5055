import uuid

from pydantic import BaseModel, ConfigDict


class PredictionRequest(BaseModel):
    match_id: uuid.UUID
    # Sign is checked by PredictionService so the rule lives in one place.
    predicted_score_home: int
    predicted_score_away: int


class PredictionUpdate(BaseModel):
    predicted_score_home: int
    predicted_score_away: int


class PredictionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    match_id: uuid.UUID
    predicted_score_home: int
    predicted_score_away: int
    points: int


class PredictionEnvelope(BaseModel):
    message: str | None = None
    prediction: PredictionResponse


class UserPrediction(PredictionResponse):
    home_team: str
    away_team: str
    date: str
    result: str


class UserPredictionList(BaseModel):
    predictions: list[UserPrediction]
    count: int
