import uuid

from pydantic import BaseModel, ConfigDict, Field


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    home_team: str
    away_team: str
    date: str
    league: str
    season: str
    match_day: int
    result: str


class MatchCreate(BaseModel):
    home_team: str = Field(..., min_length=1)
    away_team: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    league: str = Field(..., min_length=1)
    season: str = Field(..., min_length=1)
    match_day: int = Field(..., ge=0)
    result: str = ""


class MatchListResponse(BaseModel):
    data: list[MatchResponse]
    count: int


class GameweekResponse(MatchListResponse):
    gameweek: int


class MatchDetailResponse(BaseModel):
    match: MatchResponse
    prediction_count: int


class IngestResponse(BaseModel):
    inserted: int
    skipped: int
    failed: int
