import uuid

from pydantic import BaseModel, ConfigDict


class LeaderboardRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    username: str
    total_points: int
    prediction_count: int
    rank: int


class LeaderboardResponse(BaseModel):
    leaderboard: list[LeaderboardRow]
    count: int
