import logging

from fastapi import APIRouter, Depends

from dependencies.auth import CurrentUser, require_admin
from dependencies.feed import get_fixture_sync
from schemas.matches import IngestResponse
from services.fixture_sync import FixtureSyncService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/ingest", response_model=IngestResponse)
async def ingest_fixtures(
    admin: CurrentUser = Depends(require_admin),
    sync: FixtureSyncService = Depends(get_fixture_sync),
):
    """Run a fixture refresh now. Feed failures surface as 503 here."""
    result = await sync.sync()
    logger.info("Manual fixture ingest", extra={"admin": str(admin.id), "inserted": result.inserted})
    return IngestResponse(inserted=result.inserted, skipped=result.skipped, failed=result.failed)
