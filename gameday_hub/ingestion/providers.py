"""Registry of upstream providers and the collections they feed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from gameday_hub.ingestion.http_client import ProviderResult
from gameday_hub.ingestion.places_client import fetch_places
from gameday_hub.ingestion.schedule_client import fetch_schedule
from gameday_hub.ingestion.weather_client import fetch_weather
from gameday_hub.settings import Settings


@dataclass(frozen=True)
class ProviderSpec:
    key: str
    name: str
    collections: tuple[str, ...]
    fetch: Callable[[Settings], ProviderResult]


PROVIDERS: dict[str, ProviderSpec] = {
    "schedule": ProviderSpec("schedule", "CollegeFootballData", ("events", "next"), fetch_schedule),
    "weather": ProviderSpec("weather", "Open-Meteo", ("forecast",), fetch_weather),
    "places": ProviderSpec("places", "Foursquare", ("places",), fetch_places),
}


def get_provider(key: str) -> ProviderSpec | None:
    return PROVIDERS.get(key.strip().lower())


def provider_for_collection(collection: str) -> ProviderSpec:
    for spec in PROVIDERS.values():
        if collection in spec.collections:
            return spec
    raise KeyError(f"No provider feeds collection: {collection}")
