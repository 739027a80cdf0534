"""CollegeFootballData client for the tracked team's season schedule."""

from __future__ import annotations

import logging
import os

from gameday_hub.ingestion.http_client import MISSING_CREDENTIALS, Failure, ProviderResult, fetch_json
from gameday_hub.settings import Settings

logger = logging.getLogger(__name__)
CFBD_BASE_URL = os.getenv("CFBD_BASE_URL", "https://api.collegefootballdata.com").rstrip("/")
GAMES_PATH = "/games"


def build_schedule_params(settings: Settings, season_type: str = "regular") -> dict[str, str]:
    return {
        "year": str(settings.season_year),
        "team": settings.tracked_team,
        "seasonType": season_type,
    }


def fetch_schedule(settings: Settings) -> ProviderResult:
    """Fetch the raw season game list for ``settings.tracked_team``."""

    if not settings.cfbd_api_key:
        return Failure(MISSING_CREDENTIALS, "CFBD_API_KEY is not set")

    logger.info(
        "Fetching schedule team=%s year=%s", settings.tracked_team, settings.season_year
    )
    return fetch_json(
        f"{CFBD_BASE_URL}{GAMES_PATH}",
        label="CollegeFootballData",
        params=build_schedule_params(settings),
        headers={"Authorization": f"Bearer {settings.cfbd_api_key}"},
        timeout=settings.request_timeout_seconds,
        retries=settings.max_retries,
        backoff_seconds=settings.backoff_seconds,
    )
