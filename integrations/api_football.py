from __future__ import annotations

import logging
from typing import Any

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from config import Settings
from core.exceptions import FeedError
from integrations.fixture_parser import FixtureRecord, parse_fixtures

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://v3.football.api-sports.io"


class ApiFootballClient:
    """Fetches league fixtures from api-football (api-sports.io v3)."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retries: int = 3,
        retry_wait: float = 2.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        # Read timeouts and HTTP errors are not retried.
        self._retrying = Retrying(
            stop=stop_after_attempt(max(retries, 1)),
            wait=wait_fixed(retry_wait),
            retry=retry_if_exception_type(requests.ConnectionError),
            reraise=True,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApiFootballClient":
        return cls(
            api_key=settings.api_football_key,
            base_url=settings.api_football_base_url,
            timeout=settings.feed_timeout,
            retries=settings.feed_retries,
        )

    def _get(self, url: str, params: dict[str, Any]) -> requests.Response:
        response = self.session.get(
            url,
            params=params,
            headers={"x-apisports-key": self.api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def fetch_fixtures(self, league_id: str, season: str) -> list[FixtureRecord]:
        if not self.api_key:
            raise FeedError("API_FOOTBALL_KEY is not set")

        url = f"{self.base_url}/fixtures"
        params = {"league": league_id, "season": season}
        try:
            response = self._retrying(self._get, url, params)
        except requests.Timeout as exc:
            raise FeedError(f"fixture feed timed out after {self.timeout}s") from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "unknown"
            raise FeedError(f"fixture feed returned status {status}") from exc
        except requests.RequestException as exc:
            raise FeedError(f"fixture feed request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FeedError("fixture feed returned invalid JSON") from exc

        items = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise FeedError("fixture feed payload has no 'response' list")

        records = parse_fixtures(items)
        logger.info(
            "Fetched fixtures",
            extra={"league_id": league_id, "season": season, "fixtures": len(records)},
        )
        return records

    def close(self) -> None:
        self.session.close()
