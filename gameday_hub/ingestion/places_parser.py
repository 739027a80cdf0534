"""Canonicalize raw place search payloads into PlaceRecord lists."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Iterable

from pydantic import ValidationError

from gameday_hub.ingestion.field_maps import (
    PLACES_CONTAINERS,
    PLACES_FIELDS,
    SPECIALS_FIELDS,
    first_container,
    first_present,
    first_text,
)
from gameday_hub.ingestion.schema import Coordinates, PlaceRecord, SpecialRecord

logger = logging.getLogger(__name__)

WEBSITE_PATTERN = re.compile(r"^https?://\S+$", re.IGNORECASE)


def _coordinate(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _coordinates(raw: dict[str, Any]) -> Coordinates | None:
    lat = _coordinate(first_present(raw, PLACES_FIELDS["lat"]))
    lon = _coordinate(first_present(raw, PLACES_FIELDS["lon"]))
    if lat is None or lon is None:
        return None
    try:
        return Coordinates(lat=lat, lon=lon)
    except ValidationError:
        return None


def _website(raw: dict[str, Any]) -> str | None:
    url = first_text(raw, PLACES_FIELDS["website"])
    if url and WEBSITE_PATTERN.match(url):
        return url
    return None


def dedupe_key(place: PlaceRecord) -> tuple[str, ...]:
    """Provider id when known, otherwise normalized name and address."""

    if place.provider_id is not None:
        return ("id", place.provider_id)
    return ("name", place.name.casefold(), (place.address or "").casefold())


def canonicalize_place(raw: dict[str, Any]) -> PlaceRecord | None:
    name = first_text(raw, PLACES_FIELDS["name"])
    if not name:
        return None
    provider_id = first_present(raw, PLACES_FIELDS["id"])
    return PlaceRecord(
        name=name,
        provider_id=str(provider_id) if provider_id is not None else None,
        area_label=first_text(raw, PLACES_FIELDS["area_label"]),
        address=first_text(raw, PLACES_FIELDS["address"]),
        coordinates=_coordinates(raw),
        website=_website(raw),
    )


def parse_places(payload: Any) -> list[PlaceRecord]:
    """Parse a place search payload, keeping provider order.

    Duplicates are dropped by provider id when present, otherwise by
    normalized ``(name, address)``. The first occurrence wins.
    """

    items = payload if isinstance(payload, list) else first_container(payload, PLACES_CONTAINERS)
    if not isinstance(items, list):
        return []

    seen: set[tuple[str, ...]] = set()
    places: list[PlaceRecord] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            place = canonicalize_place(item)
        except ValidationError as exc:
            logger.warning("Dropping place: %s", exc.errors())
            continue
        if place is None:
            continue

        key = dedupe_key(place)
        if key in seen:
            continue
        seen.add(key)
        places.append(place)
    return places


def map_pins(places: Iterable[PlaceRecord]) -> list[PlaceRecord]:
    """Places that can be drawn on a map."""

    return [place for place in places if place.coordinates is not None]


def _special_title(raw: dict[str, Any]) -> str:
    title = first_text(raw, SPECIALS_FIELDS["title"])
    if title:
        return title
    deal = first_text(raw, SPECIALS_FIELDS["deal_title"])
    return f"{deal} · Special" if deal else "Special"


def canonicalize_special(raw: dict[str, Any]) -> SpecialRecord:
    """Normalize a community-provided special; raises ValidationError if unusable.

    A row without ``title`` is titled from ``deal_title`` or a generic label.
    """

    return SpecialRecord(
        title=_special_title(raw),
        business=first_text(raw, SPECIALS_FIELDS["business"]) or "",
        area=first_text(raw, SPECIALS_FIELDS["area"]) or "",
        time_window=first_text(raw, SPECIALS_FIELDS["time_window"]) or "",
        url=first_text(raw, SPECIALS_FIELDS["url"]),
    )
