import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateError, NotFoundError
from db.models import Match
from db.repositories import MatchRepository
from db.session import get_session
from dependencies.auth import CurrentUser, require_admin
from dependencies.feed import get_fixture_sync
from schemas.matches import (
    GameweekResponse,
    MatchCreate,
    MatchDetailResponse,
    MatchListResponse,
    MatchResponse,
)
from services.fixture_sync import FixtureSyncService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=MatchListResponse)
async def get_matches(
    sync: FixtureSyncService = Depends(get_fixture_sync),
    session: AsyncSession = Depends(get_session),
):
    """Refresh from the fixture feed, then list every stored match by kickoff."""
    await sync.sync_soft()
    matches = await MatchRepository(session).list_all()
    return {"data": matches, "count": len(matches)}


@router.get("/details/{match_id}", response_model=MatchDetailResponse)
async def get_match_details(match_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    repo = MatchRepository(session)
    match = await repo.get(match_id)
    if match is None:
        raise NotFoundError("Match not found")
    return {"match": match, "prediction_count": await repo.prediction_count(match_id)}


@router.get("/{gameweek}", response_model=GameweekResponse)
async def get_matches_for_gameweek(gameweek: int, session: AsyncSession = Depends(get_session)):
    matches = await MatchRepository(session).list_for_matchday(gameweek)
    return {"data": matches, "gameweek": gameweek, "count": len(matches)}


@router.post("", response_model=MatchListResponse, status_code=status.HTTP_201_CREATED)
async def create_matches(
    body: list[MatchCreate],
    session: AsyncSession = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
):
    """Manually add matches. Stops at the first natural-key collision."""
    repo = MatchRepository(session)
    created: list[Match] = []
    for item in body:
        try:
            created.append(await repo.add(Match(**item.model_dump())))
        except DuplicateError as exc:
            exc.message = f"{exc.message} ({len(created)} created before the conflict)"
            raise
    logger.info("Matches created manually", extra={"count": len(created), "admin": str(admin.id)})
    return {"data": created, "count": len(created)}
