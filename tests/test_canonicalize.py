from __future__ import annotations

import unittest
from datetime import date, datetime, timezone

from gameday_hub.ingestion.places_parser import canonicalize_special, map_pins, parse_places
from gameday_hub.ingestion.schedule_parser import parse_instant, parse_schedule
from gameday_hub.ingestion.weather_parser import parse_forecast

TEAM = "Tennessee"
VENUE = "Neyland Stadium"


def _game(**overrides) -> dict:
    game = {
        "id": 401,
        "start_date": "2026-09-05T23:30:00.000Z",
        "home_team": "Tennessee",
        "away_team": "Syracuse",
        "home_points": None,
        "away_points": None,
        "venue": None,
    }
    game.update(overrides)
    return game


class ScheduleParserTests(unittest.TestCase):
    def test_home_game_matches_tracked_team_case_insensitively(self) -> None:
        events = parse_schedule([_game(home_team="TENNESSEE ")], TEAM, VENUE)

        self.assertEqual(1, len(events))
        self.assertTrue(events[0].is_home)
        self.assertEqual("Syracuse", events[0].opponent_name)

    def test_away_game_orients_result_from_tracked_team(self) -> None:
        game = _game(home_team="Georgia", away_team="tennessee", home_points=31, away_points="17")

        event = parse_schedule([game], TEAM, VENUE)[0]

        self.assertFalse(event.is_home)
        self.assertEqual("Georgia", event.opponent_name)
        self.assertEqual("17-31", event.result)

    def test_home_result_puts_tracked_score_first(self) -> None:
        event = parse_schedule([_game(home_points=45, away_points=3)], TEAM, VENUE)[0]

        self.assertEqual("45-3", event.result)

    def test_unknown_side_leaves_home_and_result_unset(self) -> None:
        game = _game(home_team="Alabama", away_team="Auburn", home_points=20, away_points=10)

        event = parse_schedule([game], TEAM, VENUE)[0]

        self.assertIsNone(event.is_home)
        self.assertIsNone(event.result)
        self.assertEqual("Auburn", event.opponent_name)

    def test_missing_or_non_numeric_score_gives_no_result(self) -> None:
        events = parse_schedule(
            [
                _game(id=1, home_points=14, away_points=None),
                _game(id=2, home_points="TBD", away_points=7),
            ],
            TEAM,
            VENUE,
        )

        self.assertEqual([None, None], [event.result for event in events])

    def test_start_time_falls_through_aliases_and_drops_unparseable(self) -> None:
        payload = [
            _game(id=1, start_date="TBD", startDate="2026-09-12T16:00:00Z"),
            _game(id=2, start_date="2026-09-19"),
            _game(id=3, start_date=None),
        ]

        events = parse_schedule(payload, TEAM, VENUE)

        self.assertEqual(1, len(events))
        self.assertEqual(datetime(2026, 9, 12, 16, 0, tzinfo=timezone.utc), events[0].start_time)

    def test_camel_case_payload_is_supported(self) -> None:
        game = {
            "id": 9,
            "startDate": "2026-10-03T19:00:00Z",
            "homeTeam": "Florida",
            "awayTeam": "Tennessee",
            "homePoints": 20,
            "awayPoints": 27,
            "outlet": "ESPN",
            "venueName": "Ben Hill Griffin Stadium",
        }

        event = parse_schedule({"games": [game]}, TEAM, VENUE)[0]

        self.assertEqual("27-20", event.result)
        self.assertEqual("ESPN", event.broadcast_channel)
        self.assertEqual("Ben Hill Griffin Stadium", event.venue)

    def test_home_venue_default_only_for_home_games(self) -> None:
        events = parse_schedule(
            [
                _game(id=1),
                _game(id=2, start_date="2026-09-12T23:00:00Z", home_team="Georgia", away_team=TEAM),
            ],
            TEAM,
            VENUE,
        )

        self.assertEqual(VENUE, events[0].venue)
        self.assertIsNone(events[1].venue)

    def test_sorted_by_start_time_with_stable_ties_and_deduped_ids(self) -> None:
        payload = [
            _game(id=1, start_date="2026-09-12T16:00:00Z", away_team="Late"),
            _game(id=2, start_date="2026-09-05T16:00:00Z", away_team="First"),
            _game(id=3, start_date="2026-09-05T16:00:00Z", away_team="Second"),
            _game(id=2, start_date="2026-08-01T16:00:00Z", away_team="Duplicate"),
        ]

        events = parse_schedule(payload, TEAM, VENUE)

        self.assertEqual(["First", "Second", "Late"], [event.opponent_name for event in events])

    def test_untimed_copy_does_not_shadow_later_timed_copy_of_same_id(self) -> None:
        payload = [
            _game(id=7, start_date=None, away_team="Georgia"),
            _game(id=7, start_date="2026-11-07T20:00:00Z", away_team="Georgia"),
        ]

        events = parse_schedule(payload, TEAM, VENUE)

        self.assertEqual(["Georgia"], [event.opponent_name for event in events])

    def test_parse_instant_accepts_naive_and_epoch_values(self) -> None:
        expected = datetime(2026, 9, 5, 23, 30, tzinfo=timezone.utc)

        self.assertEqual(expected, parse_instant("2026-09-05T23:30:00"))
        self.assertEqual(expected, parse_instant(int(expected.timestamp())))
        self.assertEqual(expected, parse_instant("2026-09-05T19:30:00-04:00"))
        self.assertIsNone(parse_instant(True))
        self.assertIsNone(parse_instant("not-a-date"))


class WeatherParserTests(unittest.TestCase):
    def _payload(self, unit: str = "°C") -> dict:
        return {
            "daily_units": {"temperature_2m_max": unit, "temperature_2m_min": unit},
            "daily": {
                "time": ["2026-10-19", "2026-10-20", "2026-10-21", "2026-10-22"],
                "temperature_2m_max": [20.0, 25.0, 10.0, 12.0],
                "temperature_2m_min": [10.0, 15.0, 0.0, 2.0],
                "precipitation_probability_max": [0, 35, 100, 5],
            },
        }

    def test_converts_celsius_to_fahrenheit_and_trims_horizon(self) -> None:
        days = parse_forecast(self._payload(), "fahrenheit", 3)

        self.assertEqual(3, len(days))
        self.assertEqual(date(2026, 10, 19), days[0].date)
        self.assertEqual(68.0, days[0].high_temp)
        self.assertEqual(50.0, days[0].low_temp)
        self.assertEqual(32.0, days[2].low_temp)
        self.assertEqual([0, 35, 100], [day.precipitation_chance for day in days])

    def test_values_already_in_target_unit_are_kept(self) -> None:
        days = parse_forecast(self._payload("°F"), "fahrenheit", 3)

        self.assertEqual(20.0, days[0].high_temp)

    def test_unit_named_alias_is_normalized(self) -> None:
        payload = {
            "daily": {
                "date": ["2026-10-19"],
                "temperature_2m_max_fahrenheit": [77.0],
                "temperature_2m_min_fahrenheit": [59.0],
                "precipitation_probability": [10],
            }
        }

        days = parse_forecast(payload, "celsius", 3)

        self.assertEqual(25.0, days[0].high_temp)
        self.assertEqual(15.0, days[0].low_temp)

    def test_incomplete_and_duplicate_days_are_skipped(self) -> None:
        payload = {
            "daily": {
                "time": ["2026-10-20", "2026-10-19", "2026-10-19", "2026-10-21"],
                "temperature_2m_max": [20.0, 21.0, 30.0, None],
                "temperature_2m_min": [10.0, 11.0, 12.0, 5.0],
                "precipitation_probability_max": [10, 20, 30, 40],
            }
        }

        days = parse_forecast(payload, "celsius", 3)

        self.assertEqual([date(2026, 10, 19), date(2026, 10, 20)], [day.date for day in days])
        self.assertEqual(21.0, days[0].high_temp)

    def test_missing_daily_block_gives_empty_forecast(self) -> None:
        self.assertEqual([], parse_forecast({"error": True}))


class PlacesParserTests(unittest.TestCase):
    def _place(self, fsq_id, name, address="1 Main St", lat=35.96, lon=-83.92, **extra) -> dict:
        item = {
            "fsq_id": fsq_id,
            "name": name,
            "location": {"formatted_address": address, "neighborhood": ["Old City"]},
            "geocodes": {"main": {"latitude": lat, "longitude": lon}},
        }
        item.update(extra)
        return item

    def test_maps_nested_fields(self) -> None:
        places = parse_places({"results": [self._place("a", "Cafe", website="https://cafe.test")]})

        place = places[0]
        self.assertEqual("Cafe", place.name)
        self.assertEqual("Old City", place.area_label)
        self.assertEqual("1 Main St", place.address)
        self.assertEqual(35.96, place.coordinates.lat)
        self.assertEqual("https://cafe.test", place.website)

    def test_dedupes_by_provider_id_first_occurrence_wins(self) -> None:
        payload = {"results": [self._place("a", "Cafe"), self._place("a", "Cafe Renamed"), self._place("b", "Bar")]}

        places = parse_places(payload)

        self.assertEqual(["Cafe", "Bar"], [place.name for place in places])
        self.assertEqual(["a", "b"], [place.provider_id for place in places])

    def test_distinct_ids_sharing_a_name_are_both_kept(self) -> None:
        payload = {
            "results": [
                self._place("a", "Starbucks", address=None),
                self._place("b", "Starbucks", address=None, lat=35.97),
            ]
        }

        places = parse_places(payload)

        self.assertEqual(2, len(places))

    def test_places_without_id_dedupe_by_name_and_address(self) -> None:
        payload = [
            self._place(None, "Cafe"),
            self._place(None, " cafe ", address="1 MAIN ST"),
            self._place(None, "Cafe", address="2 Main St"),
        ]

        places = parse_places(payload)

        self.assertEqual(["1 Main St", "2 Main St"], [place.address for place in places])

    def test_places_without_coordinates_stay_listed_but_are_not_pins(self) -> None:
        payload = {
            "results": [
                self._place("a", "Cafe"),
                self._place("b", "Bar", lat=None),
                {"fsq_id": "c", "location": {"locality": "Knoxville"}},
            ]
        }

        places = parse_places(payload)

        self.assertEqual(["Cafe", "Bar"], [place.name for place in places])
        self.assertIsNone(places[1].coordinates)
        self.assertEqual(["Cafe"], [place.name for place in map_pins(places)])

    def test_non_http_website_is_dropped(self) -> None:
        places = parse_places([self._place("a", "Cafe", website="javascript:alert(1)")])

        self.assertIsNone(places[0].website)

    def test_upper_case_scheme_keeps_place_and_website(self) -> None:
        places = parse_places([self._place("a", "Cafe", website="HTTPS://cafe.test")])

        self.assertEqual(["Cafe"], [place.name for place in places])
        self.assertEqual("HTTPS://cafe.test", places[0].website)

    def test_special_aliases_are_normalized(self) -> None:
        special = canonicalize_special(
            {"title": "Half-price wings", "biz": "Wing Spot", "time": "4-7pm", "link": "https://w.test"}
        )

        self.assertEqual("Half-price wings", special.title)
        self.assertEqual("Wing Spot", special.business)
        self.assertEqual("4-7pm", special.time_window)
        self.assertEqual("https://w.test", special.url)

    def test_special_without_title_falls_back_to_deal_title_or_label(self) -> None:
        self.assertEqual("Wings · Special", canonicalize_special({"deal_title": "Wings"}).title)
        self.assertEqual("Special", canonicalize_special({"biz": "Wing Spot"}).title)


if __name__ == "__main__":
    unittest.main()
