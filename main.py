from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from config import Settings, get_settings
from config_validator import validate_env
from core.logging_config import setup_logging
from core.rate_limit import build_limiter
from core.sentry_config import init_sentry
from db.session import create_engine, create_sessionmaker, init_models
from integrations.api_football import ApiFootballClient
from integrations.circuit_breaker import CircuitBreaker
from middleware.error_handler import add_exception_handlers, request_id_middleware
from middleware.security_headers import SecurityHeadersMiddleware
from routes import admin, health, leaderboard, matches, predictions

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Application Lifecycle
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(
        settings.log_level,
        json_output=settings.log_json,
        log_file=settings.log_file or None,
    )
    app.state.sentry_enabled = init_sentry(settings)
    validate_env(settings)
    await init_models(app.state.engine)
    logger.info(
        "Ball Knowledge API starting",
        extra={"environment": settings.api_env, "version": API_VERSION},
    )
    yield
    app.state.feed_client.close()
    await app.state.engine.dispose()
    logger.info("Ball Knowledge API shutting down")


# ---------------------------------------------------------------------------
# Application Factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    application = FastAPI(
        title="Ball Knowledge API",
        description="Score predictions, fixture results and the leaderboard.",
        version=API_VERSION,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # Shared resources; handed to request handlers through dependencies.
    application.state.settings = settings
    application.state.engine = create_engine(settings.database_url)
    application.state.sessionmaker = create_sessionmaker(application.state.engine)
    application.state.feed_client = ApiFootballClient.from_settings(settings)
    application.state.feed_breaker = CircuitBreaker(
        failure_threshold=settings.feed_failure_threshold,
        recovery_time=settings.feed_recovery_seconds,
    )
    application.dependency_overrides[get_settings] = lambda: settings

    # -------------------------------------------------------------------
    # Middleware  (outermost → innermost)
    # -------------------------------------------------------------------

    application.state.limiter = build_limiter(settings)
    application.add_middleware(SlowAPIMiddleware)
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )
    application.middleware("http")(request_id_middleware)

    @application.middleware("http")
    async def timing_middleware(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1_000
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"
        logger.debug(
            "Request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response

    add_exception_handlers(application)

    # -------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------

    application.include_router(health.router, prefix="/api/health", tags=["System"])
    application.include_router(matches.router, prefix="/api/matches", tags=["Matches"])
    application.include_router(predictions.router, prefix="/api", tags=["Predictions"])
    application.include_router(leaderboard.router, prefix="/api/leaderboard", tags=["Leaderboard"])
    application.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

    return application


# ---------------------------------------------------------------------------
# Entry Point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        create_app(_settings),
        host="0.0.0.0",
        port=8081,
        log_level=_settings.log_level.lower(),
        access_log=True,
    )
