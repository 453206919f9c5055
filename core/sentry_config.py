import logging

import sentry_sdk

from config import Settings

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry error reporting when a DSN is configured.
    """
    if not settings.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        traces_sample_rate=0.5 if settings.is_production else 1.0,
        environment=settings.api_env,
    )
    logger.info("Sentry initialised", extra={"environment": settings.api_env})
    return True
