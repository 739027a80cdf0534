"""Canonicalize raw forecast payloads into ForecastDayRecord lists."""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any

from pydantic import ValidationError

from gameday_hub.ingestion.field_maps import (
    WEATHER_ALIAS_UNITS,
    WEATHER_CONTAINERS,
    WEATHER_DEFAULT_UNIT,
    WEATHER_FIELDS,
    WEATHER_UNITS_CONTAINERS,
    candidates,
    first_container,
)
from gameday_hub.ingestion.schema import ForecastDayRecord

logger = logging.getLogger(__name__)
UNIT_SYMBOLS = {"fahrenheit": "°F", "celsius": "°C"}


def _finite(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _normalize_unit(raw_unit: Any) -> str:
    text = str(raw_unit or "").strip().lower()
    if "f" in text:
        return "°F"
    if "c" in text:
        return "°C"
    return WEATHER_DEFAULT_UNIT


def convert_temperature(value: float, from_unit: str, to_unit: str) -> float:
    if from_unit == to_unit:
        return round(value, 1)
    if to_unit == "°F":
        return round(value * 9 / 5 + 32, 1)
    return round((value - 32) * 5 / 9, 1)


def _column(
    daily: dict[str, Any], units: dict[str, Any], concept: str
) -> tuple[list[Any], str]:
    """Return the first list-valued alias column and its unit."""

    for alias, value in candidates(daily, WEATHER_FIELDS[concept]):
        if isinstance(value, list):
            unit = WEATHER_ALIAS_UNITS.get(alias) or _normalize_unit(units.get(alias))
            return value, unit
    return [], WEATHER_DEFAULT_UNIT


def _cell(column: list[Any], index: int) -> Any:
    return column[index] if index < len(column) else None


def _parse_day(value: Any) -> date | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def parse_forecast(
    payload: Any, temperature_unit: str = "fahrenheit", horizon_days: int = 3
) -> list[ForecastDayRecord]:
    """Parse a columnar daily forecast into at most ``horizon_days`` records."""

    daily = first_container(payload, WEATHER_CONTAINERS)
    if not isinstance(daily, dict):
        return []
    units = first_container(payload, WEATHER_UNITS_CONTAINERS)
    if not isinstance(units, dict):
        units = {}

    target_unit = UNIT_SYMBOLS.get(temperature_unit, "°F")
    dates, _ = _column(daily, units, "date")
    highs, high_unit = _column(daily, units, "high_temp")
    lows, low_unit = _column(daily, units, "low_temp")
    precips, _ = _column(daily, units, "precipitation_chance")

    by_day: dict[date, ForecastDayRecord] = {}
    for index, raw_day in enumerate(dates):
        day = _parse_day(raw_day)
        high = _finite(_cell(highs, index))
        low = _finite(_cell(lows, index))
        precip = _finite(_cell(precips, index))
        if day is None or high is None or low is None or precip is None:
            logger.info("Skipping incomplete forecast row index=%s date=%s", index, raw_day)
            continue
        if day in by_day:
            continue
        try:
            by_day[day] = ForecastDayRecord(
                date=day,
                high_temp=convert_temperature(high, high_unit, target_unit),
                low_temp=convert_temperature(low, low_unit, target_unit),
                precipitation_chance=round(precip),
            )
        except ValidationError as exc:
            logger.warning("Dropping forecast day date=%s: %s", day, exc.errors())

    ordered = [by_day[day] for day in sorted(by_day)]
    return ordered[:horizon_days]
