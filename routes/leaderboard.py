from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_session
from schemas.leaderboard import LeaderboardResponse
from services.leaderboard import LeaderboardAggregator

router = APIRouter()


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(session: AsyncSession = Depends(get_session)):
    entries = await LeaderboardAggregator(session).build()
    return {"leaderboard": entries, "count": len(entries)}
