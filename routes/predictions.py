import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_session
from dependencies.auth import CurrentUser, get_current_user
from schemas.predictions import (
    PredictionEnvelope,
    PredictionRequest,
    PredictionUpdate,
    UserPrediction,
    UserPredictionList,
)
from services.predictions import PredictionService

router = APIRouter()


def get_prediction_service(session: AsyncSession = Depends(get_session)) -> PredictionService:
    return PredictionService(session)


@router.post("/predictions", response_model=PredictionEnvelope, status_code=status.HTTP_201_CREATED)
async def create_prediction(
    body: PredictionRequest,
    user: CurrentUser = Depends(get_current_user),
    service: PredictionService = Depends(get_prediction_service),
):
    prediction = await service.create(
        user.id, body.match_id, body.predicted_score_home, body.predicted_score_away
    )
    return {"message": "Prediction created successfully", "prediction": prediction}


@router.get("/predictions/{match_id}", response_model=PredictionEnvelope)
async def get_prediction(
    match_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    service: PredictionService = Depends(get_prediction_service),
):
    return {"prediction": await service.get_for_match(user.id, match_id)}


@router.put("/predictions/{prediction_id}", response_model=PredictionEnvelope)
async def update_prediction(
    prediction_id: uuid.UUID,
    body: PredictionUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: PredictionService = Depends(get_prediction_service),
):
    prediction = await service.update(
        user.id, prediction_id, body.predicted_score_home, body.predicted_score_away
    )
    return {"message": "Prediction updated successfully", "prediction": prediction}


@router.get("/my-predictions", response_model=UserPredictionList)
async def get_user_predictions(
    user: CurrentUser = Depends(get_current_user),
    service: PredictionService = Depends(get_prediction_service),
):
    rows = await service.list_for_user(user.id)
    predictions = [
        UserPrediction(
            id=row.prediction.id,
            user_id=row.prediction.user_id,
            match_id=row.prediction.match_id,
            predicted_score_home=row.prediction.predicted_score_home,
            predicted_score_away=row.prediction.predicted_score_away,
            points=row.prediction.points,
            home_team=row.home_team,
            away_team=row.away_team,
            date=row.date,
            result=row.result,
        )
        for row in rows
    ]
    return {"predictions": predictions, "count": len(predictions)}
