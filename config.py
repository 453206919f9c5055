from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./ballknowledge.db"

    # api-football
    api_football_key: str = ""
    api_football_base_url: str = "https://v3.football.api-sports.io"
    league_id: str = "39"
    season: str = "2024"
    league_name: str = "Premier League"
    feed_timeout: float = 30.0
    feed_retries: int = 3
    feed_failure_threshold: int = 5
    feed_recovery_seconds: float = 60.0

    jwt_secret: str = ""
    allowed_origins: str = "http://localhost:3000"
    api_env: str = "development"
    log_level: str = "INFO"
    log_json: bool = False
    log_file: str = ""
    sentry_dsn: str = ""
    rate_limit: str = "120/minute"

    @property
    def origin_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.api_env == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
