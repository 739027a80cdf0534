"""Open-Meteo client for the short daily forecast around the venue."""

from __future__ import annotations

import logging
import os

from gameday_hub.ingestion.http_client import ProviderResult, fetch_json
from gameday_hub.settings import Settings

logger = logging.getLogger(__name__)
OPEN_METEO_BASE_URL = os.getenv("OPEN_METEO_BASE_URL", "https://api.open-meteo.com").rstrip("/")
FORECAST_PATH = "/v1/forecast"
DAILY_FIELDS = (
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_probability_max",
)


def build_forecast_params(settings: Settings) -> dict[str, str]:
    return {
        "latitude": str(settings.venue_lat),
        "longitude": str(settings.venue_lon),
        "daily": ",".join(DAILY_FIELDS),
        "forecast_days": str(settings.forecast_days),
        "timezone": settings.local_timezone,
        "temperature_unit": settings.temperature_unit,
    }


def fetch_weather(settings: Settings) -> ProviderResult:
    logger.info(
        "Fetching forecast lat=%s lon=%s days=%s",
        settings.venue_lat,
        settings.venue_lon,
        settings.forecast_days,
    )
    return fetch_json(
        f"{OPEN_METEO_BASE_URL}{FORECAST_PATH}",
        label="Open-Meteo",
        params=build_forecast_params(settings),
        timeout=settings.request_timeout_seconds,
        retries=settings.max_retries,
        backoff_seconds=settings.backoff_seconds,
    )
