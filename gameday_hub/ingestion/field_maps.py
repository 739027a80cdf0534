"""Per-provider field alias tables.

Each table maps a canonical concept to the raw field names (or dotted paths)
seen across provider API versions, in order of preference. Parsers only read
raw payloads through these tables.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator

SCHEDULE_CONTAINERS: tuple[str, ...] = ("games", "data")
SCHEDULE_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("id", "game_id", "gameId"),
    "start_time": ("start_date", "startDate", "start_time", "startTime", "date"),
    "home_team": ("home_team", "homeTeam", "home.name"),
    "away_team": ("away_team", "awayTeam", "away.name"),
    "home_points": ("home_points", "homePoints", "home.points"),
    "away_points": ("away_points", "awayPoints", "away.points"),
    "broadcast": ("tv", "outlet", "broadcast"),
    "venue": ("venue", "venue_name", "venueName"),
}

# Open-Meteo returns column arrays under "daily"; each alias names a column.
WEATHER_CONTAINERS: tuple[str, ...] = ("daily",)
WEATHER_UNITS_CONTAINERS: tuple[str, ...] = ("daily_units",)
WEATHER_FIELDS: dict[str, tuple[str, ...]] = {
    "date": ("time", "date"),
    "high_temp": (
        "temperature_2m_max",
        "temperature_max",
        "temperature_2m_max_fahrenheit",
        "temperature_2m_max_celsius",
    ),
    "low_temp": (
        "temperature_2m_min",
        "temperature_min",
        "temperature_2m_min_fahrenheit",
        "temperature_2m_min_celsius",
    ),
    "precipitation_chance": (
        "precipitation_probability_max",
        "precipitation_probability_mean",
        "precipitation_probability",
    ),
}
# Unit implied by the alias itself; others fall back to the payload's units.
WEATHER_ALIAS_UNITS: dict[str, str] = {
    "temperature_2m_max_fahrenheit": "°F",
    "temperature_2m_min_fahrenheit": "°F",
    "temperature_2m_max_celsius": "°C",
    "temperature_2m_min_celsius": "°C",
}
WEATHER_DEFAULT_UNIT = "°C"

PLACES_CONTAINERS: tuple[str, ...] = ("results", "places")
PLACES_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("fsq_id", "fsq_place_id", "id"),
    "name": ("name",),
    "area_label": ("location.neighborhood.0", "location.locality", "location.region"),
    "address": ("location.formatted_address", "location.address"),
    "lat": ("geocodes.main.latitude", "latitude", "geocodes.roof.latitude"),
    "lon": ("geocodes.main.longitude", "longitude", "geocodes.roof.longitude"),
    "website": ("website", "link", "url"),
}

SPECIALS_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("title",),
    "deal_title": ("deal_title",),
    "business": ("business", "biz", "business_name"),
    "area": ("area",),
    "time_window": ("time_window", "time"),
    "url": ("url", "link"),
}


def dig(raw: Any, path: str) -> Any:
    """Follow a dotted path through dicts and lists; missing steps give None."""

    current = raw
    for step in path.split("."):
        if isinstance(current, dict):
            current = current.get(step)
        elif isinstance(current, list) and step.isdigit():
            index = int(step)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def candidates(raw: Any, aliases: Iterable[str]) -> Iterator[tuple[str, Any]]:
    """Yield ``(alias, value)`` for every alias holding a non-blank value."""

    for alias in aliases:
        value = dig(raw, alias)
        if not _is_blank(value):
            yield alias, value


def first_present(raw: Any, aliases: Iterable[str]) -> Any:
    for _, value in candidates(raw, aliases):
        return value
    return None


def first_text(raw: Any, aliases: Iterable[str]) -> str | None:
    value = first_present(raw, aliases)
    if value is None:
        return None
    return " ".join(str(value).split())


def first_container(raw: Any, names: Iterable[str]) -> Any:
    if not isinstance(raw, dict):
        return None
    for name in names:
        value = raw.get(name)
        if value is not None:
            return value
    return None
