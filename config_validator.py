import logging

from config import Settings

logger = logging.getLogger(__name__)


def validate_env(settings: Settings) -> None:
    """Refuse to boot a production process that would fall back to dev defaults."""
    if settings.is_production:
        missing = []
        if not settings.jwt_secret:
            missing.append("JWT_SECRET")
        if "database_url" not in settings.model_fields_set:
            missing.append("DATABASE_URL")
        if missing:
            raise RuntimeError(f"Missing environment variables: {missing}")

    if not settings.api_football_key:
        logger.warning("API_FOOTBALL_KEY is not set; fixture refresh will be skipped on every read")
