"""Foursquare client for places near the venue."""

from __future__ import annotations

import logging
import os

from gameday_hub.ingestion.http_client import MISSING_CREDENTIALS, Failure, ProviderResult, fetch_json
from gameday_hub.settings import Settings

logger = logging.getLogger(__name__)
FOURSQUARE_BASE_URL = os.getenv("FOURSQUARE_BASE_URL", "https://api.foursquare.com").rstrip("/")
SEARCH_PATH = "/v3/places/search"
RESPONSE_FIELDS = "fsq_id,name,location,geocodes,website,link"


def build_search_params(settings: Settings) -> dict[str, str]:
    return {
        "ll": f"{settings.venue_lat},{settings.venue_lon}",
        "radius": str(settings.places_radius_meters),
        "limit": str(settings.places_limit),
        "categories": settings.places_categories,
        "fields": RESPONSE_FIELDS,
    }


def fetch_places(settings: Settings) -> ProviderResult:
    """Search places around the venue.

    Runs keyless: without FSQ_API_KEY no request is made and a
    ``missing_credentials`` failure is returned.
    """

    if not settings.fsq_api_key:
        return Failure(MISSING_CREDENTIALS, "FSQ_API_KEY is not set")

    logger.info(
        "Fetching places ll=%s,%s radius=%s",
        settings.venue_lat,
        settings.venue_lon,
        settings.places_radius_meters,
    )
    return fetch_json(
        f"{FOURSQUARE_BASE_URL}{SEARCH_PATH}",
        label="Foursquare",
        params=build_search_params(settings),
        headers={"Authorization": settings.fsq_api_key},
        timeout=settings.request_timeout_seconds,
        retries=settings.max_retries,
        backoff_seconds=settings.backoff_seconds,
    )
