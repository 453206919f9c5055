import asyncio
import platform
import time
from datetime import datetime, timezone
from typing import Optional

import psutil
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import func, select

from core.exceptions import AppBaseException
from db.models import Match, Prediction

router = APIRouter()

_STARTED_AT = time.time()
DB_PING_TIMEOUT = 5


class NotReadyError(AppBaseException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "NOT_READY"


class ComponentHealth(BaseModel):
    status: str  # healthy | degraded | unhealthy
    latency_ms: Optional[float] = None
    detail: Optional[str] = None
    info: dict[str, int | str] = {}


class ProcessMetrics(BaseModel):
    cpu_percent: float
    memory_percent: float
    rss_mb: float
    python_version: str


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str
    uptime_seconds: float
    timestamp: str
    components: dict[str, ComponentHealth]
    process: ProcessMetrics


async def check_database(request: Request) -> ComponentHealth:
    """Counts stored matches and predictions; doubles as a connectivity ping."""
    started = time.perf_counter()
    try:
        async with request.app.state.sessionmaker() as session:
            query = select(
                select(func.count(Match.id)).scalar_subquery(),
                select(func.count(Prediction.id)).scalar_subquery(),
            )
            result = await asyncio.wait_for(session.execute(query), timeout=DB_PING_TIMEOUT)
            matches, predictions = result.one()
    except Exception as exc:
        return ComponentHealth(status="unhealthy", detail=str(exc) or type(exc).__name__)
    return ComponentHealth(
        status="healthy",
        latency_ms=round((time.perf_counter() - started) * 1000, 2),
        info={"matches": matches, "predictions": predictions},
    )


def check_fixture_feed(request: Request) -> ComponentHealth:
    # Stored matches keep serving while the feed is down, so never unhealthy.
    breaker = request.app.state.feed_breaker
    settings = request.app.state.settings
    state = breaker.state
    return ComponentHealth(
        status="degraded" if state == "open" else "healthy",
        detail=f"circuit {state}",
        info={
            "consecutive_failures": breaker.failures,
            "league_id": settings.league_id,
            "season": settings.season,
        },
    )


def process_metrics() -> ProcessMetrics:
    proc = psutil.Process()
    return ProcessMetrics(
        cpu_percent=proc.cpu_percent(interval=None),
        memory_percent=round(proc.memory_percent(), 2),
        rss_mb=round(proc.memory_info().rss / 1_048_576, 1),
        python_version=platform.python_version(),
    )


def overall_status(components: dict[str, ComponentHealth]) -> str:
    for level in ("unhealthy", "degraded"):
        if any(c.status == level for c in components.values()):
            return level
    return "healthy"


@router.get("", summary="Full health check", response_model=HealthResponse)
async def health_check(request: Request) -> JSONResponse:
    """200 while healthy or degraded, 503 once the database is unreachable."""
    components = {
        "database": await check_database(request),
        "fixture_feed": check_fixture_feed(request),
    }
    overall = overall_status(components)
    payload = HealthResponse(
        status=overall,
        version=request.app.version,
        environment=request.app.state.settings.api_env,
        uptime_seconds=round(time.time() - _STARTED_AT, 2),
        timestamp=datetime.now(timezone.utc).isoformat(),
        components=components,
        process=process_metrics(),
    )
    code = status.HTTP_503_SERVICE_UNAVAILABLE if overall == "unhealthy" else status.HTTP_200_OK
    return JSONResponse(content=payload.model_dump(), status_code=code)


@router.get("/live", summary="Liveness probe")
async def liveness() -> dict:
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/ready", summary="Readiness probe")
async def readiness(request: Request) -> dict:
    database = await check_database(request)
    if database.status == "unhealthy":
        raise NotReadyError(f"database unavailable: {database.detail}")
    return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
