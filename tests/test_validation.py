from __future__ import annotations

import json
import tempfile
import unittest
from datetime import date, datetime, timedelta, timezone

from gameday_hub.events.selection import NO_SELECTION, NextEventSelection, SelectionKind
from gameday_hub.ingestion.schema import (
    Coordinates,
    EventRecord,
    EventState,
    ForecastDayRecord,
    PlaceRecord,
    PublicationMetadata,
)
from gameday_hub.publish.store import SnapshotStore
from gameday_hub.publish.validation import (
    EVENTS_CONTRACT,
    FORECAST_CONTRACT,
    METADATA_CONTRACT,
    PLACES_CONTRACT,
    events_payload,
    forecast_payload,
    next_payload,
    places_payload,
    validate_published,
    validate_snapshot,
)
from gameday_hub.settings import Settings

NOW = datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc)


def _events() -> list[EventRecord]:
    return [
        EventRecord(
            start_time=NOW - timedelta(days=7),
            opponent_name="Alabama",
            is_home=True,
            broadcast_channel="CBS",
            result="24-20",
            venue="Neyland Stadium",
        ),
        EventRecord(start_time=NOW + timedelta(days=5), opponent_name="Kentucky", is_home=False),
    ]


def _forecast() -> list[ForecastDayRecord]:
    return [
        ForecastDayRecord(date=date(2026, 10, 19), high_temp=71.6, low_temp=50.0, precipitation_chance=10),
        ForecastDayRecord(date=date(2026, 10, 20), high_temp=68.0, low_temp=48.2, precipitation_chance=40),
    ]


def _places() -> list[PlaceRecord]:
    return [
        PlaceRecord(
            name="Cafe",
            area_label="Old City",
            address="1 Main St",
            coordinates=Coordinates(lat=35.96, lon=-83.92),
            website="https://cafe.test",
        ),
        PlaceRecord(name="Bar"),
    ]


def _validate(**overrides):
    events = overrides.pop("events", _events())
    selection = overrides.pop(
        "selection", NextEventSelection(SelectionKind.NEXT, events[-1] if events else None)
    )
    return validate_snapshot(
        Settings(),
        events=events,
        selection=selection,
        state=overrides.pop("state", EventState.IDLE),
        forecast=overrides.pop("forecast", _forecast()),
        places=overrides.pop("places", _places()),
    )


class RoundTripTests(unittest.TestCase):
    def test_records_survive_serialization_unchanged(self) -> None:
        cases = [
            (EVENTS_CONTRACT, events_payload(_events()), _events()),
            (FORECAST_CONTRACT, forecast_payload(_forecast()), _forecast()),
            (PLACES_CONTRACT, places_payload(_places()), _places()),
        ]
        for contract, payload, records in cases:
            decoded = contract.validate_json(json.dumps(payload))
            self.assertEqual(records, decoded)

    def test_optional_absence_is_kept_as_null(self) -> None:
        payload = events_payload(_events())[1]

        self.assertIsNone(payload["result"])
        self.assertIsNone(payload["broadcast_channel"])
        self.assertFalse(payload["is_home"])
        self.assertEqual("2026-10-24T14:00:00Z", payload["start_time"])

    def test_metadata_round_trip(self) -> None:
        meta = PublicationMetadata(
            published_at=NOW,
            provider_provenance={"events": "CollegeFootballData", "places": None},
            source_year=2026,
            collections={"events": "published"},
        )

        decoded = METADATA_CONTRACT.validate_json(json.dumps(meta.model_dump(mode="json")))

        self.assertEqual(meta, decoded)


class ValidateSnapshotTests(unittest.TestCase):
    def test_valid_snapshot_passes(self) -> None:
        report = _validate()

        self.assertEqual([], report.rejected)
        self.assertFalse(report.failed_required)

    def test_weather_failure_does_not_block_events(self) -> None:
        bad_day = ForecastDayRecord.model_construct(
            date=date(2026, 10, 19), high_temp=70.0, low_temp=50.0, precipitation_chance=150
        )

        report = _validate(forecast=[bad_day])

        self.assertEqual(["forecast"], report.rejected)
        self.assertTrue(report.is_valid("events"))
        self.assertTrue(report.is_valid("next"))
        self.assertFalse(report.failed_required)

    def test_forecast_beyond_horizon_or_out_of_order_is_rejected(self) -> None:
        days = [
            ForecastDayRecord(date=date(2026, 10, 19 + offset), high_temp=70.0, low_temp=50.0, precipitation_chance=0)
            for offset in range(4)
        ]

        self.assertEqual(["forecast"], _validate(forecast=days).rejected)
        self.assertEqual(["forecast"], _validate(forecast=list(reversed(days[:2]))).rejected)

    def test_next_event_missing_from_events_is_a_consistency_error(self) -> None:
        stray = EventRecord(start_time=NOW + timedelta(days=3), opponent_name="Nobody")

        report = _validate(selection=NextEventSelection(SelectionKind.NEXT, stray))

        self.assertEqual(["next"], report.rejected)
        self.assertIn("ConsistencyError", report.checks["next"].errors[0])
        self.assertTrue(report.failed_required)

    def test_fallback_is_not_checked_against_events(self) -> None:
        stray = EventRecord(start_time=NOW - timedelta(days=3), opponent_name="Nobody", result="3-0", is_home=True)

        report = _validate(
            selection=NextEventSelection(SelectionKind.FALLBACK, stray), state=EventState.FINAL
        )

        self.assertTrue(report.is_valid("next"))

    def test_unordered_events_reject_events_and_dependent_next(self) -> None:
        events = list(reversed(_events()))

        report = _validate(events=events, selection=NextEventSelection(SelectionKind.NEXT, events[0]))

        self.assertEqual(["events", "next"], report.rejected)
        self.assertTrue(report.failed_required)

    def test_empty_schedule_with_none_selection_is_valid(self) -> None:
        report = _validate(events=[], selection=NO_SELECTION)

        self.assertTrue(report.is_valid("events"))
        self.assertTrue(report.is_valid("next"))
        self.assertEqual({}, next_payload(NO_SELECTION, EventState.IDLE))

    def test_duplicate_places_are_rejected(self) -> None:
        report = _validate(places=[PlaceRecord(name="Bar"), PlaceRecord(name="bar")])

        self.assertEqual(["places"], report.rejected)
        self.assertFalse(report.failed_required)

    def test_places_with_distinct_ids_may_share_a_name(self) -> None:
        places = [PlaceRecord(name="Starbucks", provider_id="a"), PlaceRecord(name="Starbucks", provider_id="b")]

        self.assertTrue(_validate(places=places).is_valid("places"))
        self.assertEqual(
            ["places"],
            _validate(places=[places[0], PlaceRecord(name="Other", provider_id="a")]).rejected,
        )


class ValidatePublishedTests(unittest.TestCase):
    def test_published_files_and_specials_are_checked(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SnapshotStore(tmp)
            events = _events()
            store.write("events", events_payload(events))
            store.write(
                "next",
                next_payload(NextEventSelection(SelectionKind.NEXT, events[1]), EventState.IDLE),
            )
            store.write("forecast", forecast_payload(_forecast()))
            store.write("specials", [{"title": "Wings"}, {"deal_title": "Tailgate"}, "not an object"])

            report = validate_published(store, Settings())

        self.assertEqual(["specials"], report.rejected)
        self.assertNotIn("places", report.checks)
        self.assertTrue(report.is_valid("next"))


if __name__ == "__main__":
    unittest.main()
