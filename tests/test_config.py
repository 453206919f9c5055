import logging

import pytest

from config import Settings
from config_validator import validate_env


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "JWT_SECRET", "API_ENV", "API_FOOTBALL_KEY", "ALLOWED_ORIGINS", "SENTRY_DSN"):
        monkeypatch.delenv(name, raising=False)


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("LEAGUE_ID", "140")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example,")

    settings = Settings(_env_file=None)

    assert settings.league_id == "140"
    assert settings.season == "2024"
    assert settings.league_name == "Premier League"
    assert settings.feed_timeout == 30.0
    assert settings.origin_list == ["https://a.example", "https://b.example"]


def test_production_requires_secrets():
    with pytest.raises(RuntimeError, match="JWT_SECRET.*DATABASE_URL"):
        validate_env(Settings(_env_file=None, api_env="production"))


def test_production_with_secrets_boots(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://app@db/ballknowledge")
    monkeypatch.setenv("JWT_SECRET", "s3cret")

    validate_env(Settings(_env_file=None, api_env="production", api_football_key="k"))


def test_missing_feed_key_only_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="config_validator"):
        validate_env(Settings(_env_file=None))

    assert "API_FOOTBALL_KEY is not set" in caplog.text


def test_sentry_skipped_without_dsn():
    from core.sentry_config import init_sentry

    assert init_sentry(Settings(_env_file=None)) is False
