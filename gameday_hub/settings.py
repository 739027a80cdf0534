from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

REQUIRED = "required"
OPTIONAL = "optional"

DEFAULT_TRACKED_TEAM = "Tennessee"
DEFAULT_HOME_VENUE = "Neyland Stadium"
DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_VENUE_LAT = 35.9606
DEFAULT_VENUE_LON = -83.9207
DEFAULT_REQUIRED_PROVIDERS = "schedule"
# restaurants, bars, cafes
DEFAULT_PLACES_CATEGORIES = "13065,13032,13034"
PROVIDER_KEYS = ("schedule", "weather", "places")


@dataclass(frozen=True)
class Settings:
    tracked_team: str = DEFAULT_TRACKED_TEAM
    home_venue: str = DEFAULT_HOME_VENUE
    season_year: int = field(default_factory=lambda: datetime.now(timezone.utc).year)
    venue_lat: float = DEFAULT_VENUE_LAT
    venue_lon: float = DEFAULT_VENUE_LON
    local_timezone: str = DEFAULT_TIMEZONE
    live_window_hours: float = 5.0
    forecast_days: int = 3
    temperature_unit: str = "fahrenheit"
    data_dir: str = "data"
    cfbd_api_key: str | None = None
    fsq_api_key: str | None = None
    request_timeout_seconds: float = 12.0
    max_retries: int = 2
    backoff_seconds: float = 0.4
    places_radius_meters: int = 4000
    places_limit: int = 20
    places_categories: str = DEFAULT_PLACES_CATEGORIES
    provider_criticality: dict[str, str] = field(
        default_factory=lambda: _criticality_from(DEFAULT_REQUIRED_PROVIDERS)
    )

    @property
    def live_window(self) -> timedelta:
        return timedelta(hours=self.live_window_hours)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.local_timezone)

    def is_required(self, provider: str) -> bool:
        return self.provider_criticality.get(provider, OPTIONAL) == REQUIRED


def _criticality_from(raw: str) -> dict[str, str]:
    required = {item.strip().lower() for item in raw.split(",") if item.strip()}
    unknown = sorted(required - set(PROVIDER_KEYS))
    if unknown:
        raise ValueError(
            f"GAMEDAY_REQUIRED_PROVIDERS has unknown providers: {', '.join(unknown)}. "
            f"Supported: {', '.join(PROVIDER_KEYS)}"
        )
    return {key: REQUIRED if key in required else OPTIONAL for key in PROVIDER_KEYS}


def _env_str(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip()
    return value or default


def _env_secret(name: str) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_number(name: str, default, cast):
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a {cast.__name__}, got {raw!r}") from exc


def _env_non_negative(name: str, default, cast):
    value = _env_number(name, default, cast)
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value!r}")
    return value


def load_settings() -> Settings:
    """Build a Settings snapshot from environment variables."""

    unit = _env_str("TEMPERATURE_UNIT", "fahrenheit").lower()
    if unit not in {"fahrenheit", "celsius"}:
        raise ValueError(f"TEMPERATURE_UNIT must be fahrenheit or celsius, got {unit!r}")

    settings = Settings(
        tracked_team=_env_str("TRACKED_TEAM", DEFAULT_TRACKED_TEAM),
        home_venue=_env_str("HOME_VENUE", DEFAULT_HOME_VENUE),
        season_year=_env_number(
            "SEASON_YEAR", datetime.now(timezone.utc).year, int
        ),
        venue_lat=_env_number("VENUE_LAT", DEFAULT_VENUE_LAT, float),
        venue_lon=_env_number("VENUE_LON", DEFAULT_VENUE_LON, float),
        local_timezone=_env_str("LOCAL_TIMEZONE", DEFAULT_TIMEZONE),
        live_window_hours=_env_number("LIVE_WINDOW_HOURS", 5.0, float),
        forecast_days=_env_number("FORECAST_DAYS", 3, int),
        temperature_unit=unit,
        data_dir=_env_str("DATA_DIR", "data"),
        cfbd_api_key=_env_secret("CFBD_API_KEY"),
        fsq_api_key=_env_secret("FSQ_API_KEY"),
        request_timeout_seconds=_env_number("REQUEST_TIMEOUT_SECONDS", 12.0, float),
        max_retries=_env_non_negative("PROVIDER_MAX_RETRIES", 2, int),
        backoff_seconds=_env_non_negative("PROVIDER_BACKOFF_SECONDS", 0.4, float),
        places_radius_meters=_env_number("PLACES_RADIUS_METERS", 4000, int),
        places_limit=_env_number("PLACES_LIMIT", 20, int),
        places_categories=_env_str("PLACES_CATEGORIES", DEFAULT_PLACES_CATEGORIES),
        provider_criticality=_criticality_from(
            _env_str("GAMEDAY_REQUIRED_PROVIDERS", DEFAULT_REQUIRED_PROVIDERS)
        ),
    )
    try:
        ZoneInfo(settings.local_timezone)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"LOCAL_TIMEZONE is not a known zone: {settings.local_timezone!r}") from exc
    if not settings.fsq_api_key:
        logger.info("FSQ_API_KEY not set. Places will be published empty.")
    return settings
