"""Contract checks run on every collection before it is published."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from pydantic import TypeAdapter, ValidationError

from gameday_hub.events.selection import NextEventSelection
from gameday_hub.ingestion.places_parser import canonicalize_special, dedupe_key
from gameday_hub.ingestion.providers import provider_for_collection
from gameday_hub.ingestion.schema import (
    EventRecord,
    EventState,
    ForecastDayRecord,
    PlaceRecord,
    PublicationMetadata,
    PublishedNextEvent,
)
from gameday_hub.publish.store import SnapshotStore, serialize
from gameday_hub.settings import Settings

logger = logging.getLogger(__name__)

COLLECTIONS = ("events", "next", "forecast", "places")

EVENTS_CONTRACT = TypeAdapter(list[EventRecord])
FORECAST_CONTRACT = TypeAdapter(list[ForecastDayRecord])
PLACES_CONTRACT = TypeAdapter(list[PlaceRecord])
NEXT_CONTRACT = TypeAdapter(PublishedNextEvent)
METADATA_CONTRACT = TypeAdapter(PublicationMetadata)


class SnapshotValidationError(ValueError):
    """A collection broke its schema or range rules."""


class ConsistencyError(SnapshotValidationError):
    """A collection disagrees with another collection it depends on."""


@dataclass
class CollectionCheck:
    name: str
    required: bool
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class ValidationReport:
    checks: dict[str, CollectionCheck] = field(default_factory=dict)

    def is_valid(self, name: str) -> bool:
        check = self.checks.get(name)
        return check is not None and check.ok

    @property
    def rejected(self) -> list[str]:
        return [name for name, check in self.checks.items() if not check.ok]

    @property
    def failed_required(self) -> bool:
        return any(check.required and not check.ok for check in self.checks.values())


def _format_errors(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        messages.append(f"{location}: {error.get('msg')}")
    return messages


def events_payload(events: Sequence[EventRecord]) -> list[dict[str, Any]]:
    return [event.model_dump(mode="json") for event in events]


def next_payload(selection: NextEventSelection, state: EventState) -> dict[str, Any]:
    """Published form of a selection; ``{}`` stands for "none"."""

    if selection.is_none or selection.event is None:
        return {}
    body = selection.event.model_dump(mode="json")
    body["selection"] = selection.kind.value
    body["state"] = state.value
    return body


def forecast_payload(days: Sequence[ForecastDayRecord]) -> list[dict[str, Any]]:
    return [day.model_dump(mode="json") for day in days]


def places_payload(places: Sequence[PlaceRecord]) -> list[dict[str, Any]]:
    return [place.model_dump(mode="json") for place in places]


def _round_trip(contract: TypeAdapter, payload: Any, expected: Any) -> Any:
    """Decode the exact bytes that would be published and compare to ``expected``."""

    try:
        decoded = contract.validate_json(serialize(payload))
    except ValidationError as exc:
        raise SnapshotValidationError("; ".join(_format_errors(exc))) from exc
    if expected is not None and decoded != expected:
        raise SnapshotValidationError("record changed after serialization round-trip")
    return decoded


def check_events(events: Sequence[EventRecord]) -> None:
    _round_trip(EVENTS_CONTRACT, events_payload(events), list(events))
    for previous, current in zip(events, events[1:]):
        if current.start_time < previous.start_time:
            raise SnapshotValidationError(
                f"events out of order at {current.start_time.isoformat()}"
            )
    for event in events:
        if event.result is not None and event.is_home is None:
            raise SnapshotValidationError(
                f"result {event.result!r} without a known home/away side"
            )


def check_next(
    selection: NextEventSelection,
    state: EventState,
    events: Sequence[EventRecord],
    events_ok: bool = True,
) -> None:
    payload = next_payload(selection, state)
    if not payload:
        if events:
            raise ConsistencyError("no event selected from a non-empty events list")
        return
    decoded = _round_trip(NEXT_CONTRACT, payload, None)
    if EventRecord(**decoded.model_dump(exclude={"selection", "state"})) != selection.event:
        raise SnapshotValidationError("next event changed after serialization round-trip")
    if not selection.is_genuine:
        return
    if not events_ok:
        raise ConsistencyError("events collection was rejected")
    if selection.event not in events:
        raise ConsistencyError(
            f"selected event at {selection.event.start_time.isoformat()} "
            "is missing from the events list"
        )


def check_forecast(days: Sequence[ForecastDayRecord], horizon_days: int) -> None:
    _round_trip(FORECAST_CONTRACT, forecast_payload(days), list(days))
    if len(days) > horizon_days:
        raise SnapshotValidationError(
            f"forecast has {len(days)} days, horizon is {horizon_days}"
        )
    for previous, current in zip(days, days[1:]):
        if current.date <= previous.date:
            raise SnapshotValidationError(
                f"forecast dates not strictly ascending at {current.date.isoformat()}"
            )


def check_places(places: Sequence[PlaceRecord]) -> None:
    _round_trip(PLACES_CONTRACT, places_payload(places), list(places))
    seen: set[tuple[str, ...]] = set()
    for place in places:
        key = dedupe_key(place)
        if key in seen:
            raise SnapshotValidationError(f"duplicate place {place.name!r}")
        seen.add(key)


def _run_check(report: ValidationReport, name: str, required: bool, check: Callable[[], None]) -> None:
    result = CollectionCheck(name=name, required=required)
    try:
        check()
    except SnapshotValidationError as exc:
        result.errors.append(f"{type(exc).__name__}: {exc}")
        logger.error(
            "Validation failed collection=%s required=%s error=%s", name, required, exc
        )
    report.checks[name] = result


def collection_required(settings: Settings, collection: str) -> bool:
    return settings.is_required(provider_for_collection(collection).key)


def validate_snapshot(
    settings: Settings,
    *,
    events: Sequence[EventRecord],
    selection: NextEventSelection,
    state: EventState,
    forecast: Sequence[ForecastDayRecord],
    places: Sequence[PlaceRecord],
) -> ValidationReport:
    """Check every collection on its own, then cross-collection consistency."""

    report = ValidationReport()
    _run_check(report, "events", collection_required(settings, "events"), lambda: check_events(events))
    _run_check(
        report,
        "next",
        collection_required(settings, "next"),
        lambda: check_next(selection, state, events, report.is_valid("events")),
    )
    _run_check(
        report,
        "forecast",
        collection_required(settings, "forecast"),
        lambda: check_forecast(forecast, settings.forecast_days),
    )
    _run_check(report, "places", collection_required(settings, "places"), lambda: check_places(places))
    return report


def _check_published_next(payload: Any, events: Iterable[EventRecord]) -> None:
    if payload == {}:
        return
    decoded = _round_trip(NEXT_CONTRACT, payload, None)
    if decoded.selection == "fallback":
        return
    event = EventRecord(**decoded.model_dump(exclude={"selection", "state"}))
    if event not in list(events):
        raise ConsistencyError("published next event is missing from schedule.json")


def _check_specials(payload: Any) -> None:
    if not isinstance(payload, list):
        raise SnapshotValidationError("specials must be a list")
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise SnapshotValidationError(f"special #{index} is not an object")
        try:
            canonicalize_special(item)
        except ValidationError as exc:
            raise SnapshotValidationError(
                f"special #{index}: " + "; ".join(_format_errors(exc))
            ) from exc


def validate_published(store: SnapshotStore, settings: Settings) -> ValidationReport:
    """Re-validate the files currently on disk. Missing files are skipped."""

    report = ValidationReport()
    stored = {name: store.read(name) for name in (*COLLECTIONS, "metadata", "specials")}
    published_events: list[EventRecord] = []

    def _events() -> None:
        published_events.extend(_round_trip(EVENTS_CONTRACT, stored["events"], None))
        check_events(published_events)

    checks: dict[str, Callable[[], None]] = {
        "events": _events,
        "next": lambda: _check_published_next(stored["next"], published_events),
        "forecast": lambda: check_forecast(
            _round_trip(FORECAST_CONTRACT, stored["forecast"], None), settings.forecast_days
        ),
        "places": lambda: check_places(_round_trip(PLACES_CONTRACT, stored["places"], None)),
        "metadata": lambda: _round_trip(METADATA_CONTRACT, stored["metadata"], None),
        "specials": lambda: _check_specials(stored["specials"]),
    }
    for name, check in checks.items():
        if stored[name] is None:
            logger.warning("%s missing, skipping", store.path_for(name))
            continue
        required = collection_required(settings, name) if name in COLLECTIONS else False
        _run_check(report, name, required, check)
    return report
