"""Canonicalize raw schedule payloads into EventRecord lists."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from gameday_hub.ingestion.field_maps import (
    SCHEDULE_CONTAINERS,
    SCHEDULE_FIELDS,
    candidates,
    first_container,
    first_present,
    first_text,
)
from gameday_hub.ingestion.schema import EventRecord

logger = logging.getLogger(__name__)
DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
UNKNOWN_OPPONENT = "TBD"


def _safe_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def parse_instant(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp or epoch seconds into an aware UTC datetime.

    Date-only strings are rejected: they do not pin down an instant.
    Naive timestamps are read as UTC.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 1e12 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned or DATE_ONLY.match(cleaned):
        return None
    try:
        parsed = datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _resolve_start_time(game: dict[str, Any]) -> datetime | None:
    for _, value in candidates(game, SCHEDULE_FIELDS["start_time"]):
        parsed = parse_instant(value)
        if parsed is not None:
            return parsed
    return None


def _same_team(candidate: str | None, tracked_team: str) -> bool:
    if not candidate:
        return False
    return candidate.strip().casefold() == tracked_team.strip().casefold()


def _resolve_sides(
    home_team: str | None, away_team: str | None, tracked_team: str
) -> tuple[bool | None, str]:
    if _same_team(home_team, tracked_team):
        return True, away_team or UNKNOWN_OPPONENT
    if _same_team(away_team, tracked_team):
        return False, home_team or UNKNOWN_OPPONENT
    return None, away_team or home_team or UNKNOWN_OPPONENT


def _format_result(game: dict[str, Any], is_home: bool | None) -> str | None:
    if is_home is None:
        return None
    home_points = _safe_int(first_present(game, SCHEDULE_FIELDS["home_points"]))
    away_points = _safe_int(first_present(game, SCHEDULE_FIELDS["away_points"]))
    if home_points is None or away_points is None:
        return None
    if is_home:
        return f"{home_points}-{away_points}"
    return f"{away_points}-{home_points}"


def canonicalize_game(
    game: dict[str, Any], tracked_team: str, home_venue: str
) -> EventRecord | None:
    """Map one raw game to an EventRecord, or None when it has no usable time."""

    start_time = _resolve_start_time(game)
    if start_time is None:
        return None

    home_team = first_text(game, SCHEDULE_FIELDS["home_team"])
    away_team = first_text(game, SCHEDULE_FIELDS["away_team"])
    is_home, opponent = _resolve_sides(home_team, away_team, tracked_team)

    venue = first_text(game, SCHEDULE_FIELDS["venue"])
    if venue is None and is_home:
        venue = home_venue

    return EventRecord(
        start_time=start_time,
        opponent_name=opponent,
        is_home=is_home,
        broadcast_channel=first_text(game, SCHEDULE_FIELDS["broadcast"]),
        result=_format_result(game, is_home),
        venue=venue,
    )


def parse_schedule(payload: Any, tracked_team: str, home_venue: str) -> list[EventRecord]:
    """Parse a raw schedule payload into a start-time ordered EventRecord list."""

    games = payload if isinstance(payload, list) else first_container(payload, SCHEDULE_CONTAINERS)
    if not isinstance(games, list):
        return []

    seen_ids: set[str] = set()
    events: list[EventRecord] = []
    dropped = 0
    for game in games:
        if not isinstance(game, dict):
            continue

        provider_id = first_present(game, SCHEDULE_FIELDS["id"])
        id_key = str(provider_id) if provider_id is not None else None
        if id_key is not None and id_key in seen_ids:
            continue

        try:
            record = canonicalize_game(game, tracked_team, home_venue)
        except ValidationError as exc:
            logger.warning("Dropping game id=%s: %s", provider_id, exc.errors())
            record = None
        if record is None:
            dropped += 1
            continue
        if id_key is not None:
            seen_ids.add(id_key)
        events.append(record)

    if dropped:
        logger.info("Dropped %s games without a usable start time", dropped)
    # sorted() is stable, so same-time games keep provider order.
    return sorted(events, key=lambda event: event.start_time)
