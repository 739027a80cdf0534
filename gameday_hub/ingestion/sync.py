"""Run one ingestion pass and publish the snapshot."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from gameday_hub.events.selection import select_next_event
from gameday_hub.events.state import classify
from gameday_hub.ingestion.http_client import MISSING_CREDENTIALS, Failure, ProviderResult, Success
from gameday_hub.ingestion.places_parser import parse_places
from gameday_hub.ingestion.providers import PROVIDERS, ProviderSpec
from gameday_hub.ingestion.schedule_parser import parse_schedule
from gameday_hub.ingestion.schema import EventState, PublicationMetadata
from gameday_hub.ingestion.weather_parser import parse_forecast
from gameday_hub.publish.store import SnapshotStore
from gameday_hub.publish.validation import (
    COLLECTIONS,
    events_payload,
    forecast_payload,
    next_payload,
    places_payload,
    validate_snapshot,
)
from gameday_hub.settings import Settings

logger = logging.getLogger(__name__)


class PipelineAborted(RuntimeError):
    """A required provider failed; nothing was published."""

    def __init__(self, provider: str, failure: Failure) -> None:
        super().__init__(
            f"required provider {provider} failed kind={failure.kind}: {failure.error}"
        )
        self.provider = provider
        self.failure = failure


@dataclass
class SyncResult:
    state: EventState = EventState.IDLE
    selection: str = "none"
    collections: dict[str, str] = field(default_factory=dict)
    provenance: dict[str, str | None] = field(default_factory=dict)
    degraded: list[str] = field(default_factory=list)
    errors: dict[str, list[str]] = field(default_factory=dict)
    failed: bool = False

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


async def _fetch_all(
    settings: Settings, providers: Mapping[str, ProviderSpec]
) -> dict[str, ProviderResult]:
    keys = list(providers)
    results = await asyncio.gather(
        *(asyncio.to_thread(providers[key].fetch, settings) for key in keys)
    )
    return dict(zip(keys, results))


def fetch_all(
    settings: Settings, providers: Mapping[str, ProviderSpec] = PROVIDERS
) -> dict[str, ProviderResult]:
    """Call every provider concurrently and wait for all of them."""

    return asyncio.run(_fetch_all(settings, providers))


def _resolve_payloads(
    settings: Settings,
    results: Mapping[str, ProviderResult],
    providers: Mapping[str, ProviderSpec],
    result: SyncResult,
) -> dict[str, Any]:
    payloads: dict[str, Any] = {}
    for key, outcome in results.items():
        spec = providers[key]
        if isinstance(outcome, Success):
            payloads[key] = outcome.payload
            continue
        if settings.is_required(key):
            logger.error(
                "Required provider failed provider=%s kind=%s error=%s",
                spec.name,
                outcome.kind,
                outcome.error,
            )
            raise PipelineAborted(spec.name, outcome)
        log = logger.info if outcome.kind == MISSING_CREDENTIALS else logger.warning
        log(
            "Optional provider degraded provider=%s kind=%s error=%s",
            spec.name,
            outcome.kind,
            outcome.error,
        )
        payloads[key] = None
        result.degraded.append(key)
    return payloads


def _previous_provenance(store: SnapshotStore) -> dict[str, Any]:
    meta = store.read("metadata")
    if isinstance(meta, dict) and isinstance(meta.get("provider_provenance"), dict):
        return meta["provider_provenance"]
    return {}


def sync_snapshot(
    settings: Settings,
    *,
    now: datetime | None = None,
    store: SnapshotStore | None = None,
    providers: Mapping[str, ProviderSpec] = PROVIDERS,
) -> SyncResult:
    """Fetch, canonicalize, validate and publish one snapshot.

    Raises PipelineAborted when a required provider fails. Collections that
    fail validation keep their previously published file.
    """

    now = now or datetime.now(timezone.utc)
    store = store or SnapshotStore(settings.data_dir)
    result = SyncResult()

    results = fetch_all(settings, providers)
    payloads = _resolve_payloads(settings, results, providers, result)

    events = (
        parse_schedule(payloads["schedule"], settings.tracked_team, settings.home_venue)
        if payloads.get("schedule") is not None
        else []
    )
    forecast = (
        parse_forecast(payloads["weather"], settings.temperature_unit, settings.forecast_days)
        if payloads.get("weather") is not None
        else []
    )
    places = parse_places(payloads["places"]) if payloads.get("places") is not None else []
    logger.info(
        "Canonicalized events=%s forecast=%s places=%s",
        len(events),
        len(forecast),
        len(places),
    )
    if not events:
        logger.warning("Schedule is empty for team=%s", settings.tracked_team)

    selection = select_next_event(events, now, settings.live_window)
    state = classify(now, selection, settings.live_window, settings.tz)
    result.selection = selection.kind.value
    result.state = state
    logger.info(
        "Selected event kind=%s start=%s state=%s",
        selection.kind.value,
        selection.event.start_time.isoformat() if selection.event else None,
        state.value,
    )

    report = validate_snapshot(
        settings,
        events=events,
        selection=selection,
        state=state,
        forecast=forecast,
        places=places,
    )
    collection_payloads = {
        "events": events_payload(events),
        "next": next_payload(selection, state),
        "forecast": forecast_payload(forecast),
        "places": places_payload(places),
    }

    previous = _previous_provenance(store)
    for name in COLLECTIONS:
        provider = next(spec for spec in providers.values() if name in spec.collections)
        if not report.is_valid(name):
            result.collections[name] = "rejected"
            result.errors[name] = report.checks[name].errors
            result.provenance[name] = previous.get(name)
            continue
        written = store.write(name, collection_payloads[name])
        result.collections[name] = "published" if written else "unchanged"
        result.provenance[name] = None if provider.key in result.degraded else provider.name

    metadata = PublicationMetadata(
        published_at=now,
        provider_provenance=result.provenance,
        source_year=settings.season_year,
        collections=result.collections,
    )
    store.write_metadata(metadata.model_dump(mode="json"))

    result.failed = report.failed_required
    if result.failed:
        logger.error("Run failed: required collections rejected=%s", report.rejected)
    return result
