"""Quick probe for provider availability."""

from __future__ import annotations

import argparse
import logging

from gameday_hub.ingestion.http_client import Failure
from gameday_hub.ingestion.places_parser import parse_places
from gameday_hub.ingestion.providers import PROVIDERS, get_provider
from gameday_hub.ingestion.schedule_parser import parse_schedule
from gameday_hub.ingestion.weather_parser import parse_forecast
from gameday_hub.settings import Settings, load_settings


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Call one provider and print how many canonical records it yields.",
    )
    parser.add_argument(
        "--provider",
        type=str,
        default="schedule",
        help="Provider key (schedule, weather, places).",
    )
    return parser.parse_args(argv)


def _normalize_provider(raw: str) -> str:
    spec = get_provider(raw)
    if spec is None:
        supported = ", ".join(sorted(PROVIDERS))
        raise SystemExit(f"Unsupported provider: {raw}. Supported providers: {supported}")
    return spec.key


def _count_records(key: str, payload, settings: Settings) -> int:
    if key == "schedule":
        return len(parse_schedule(payload, settings.tracked_team, settings.home_venue))
    if key == "weather":
        return len(parse_forecast(payload, settings.temperature_unit, settings.forecast_days))
    return len(parse_places(payload))


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = _parse_args(argv)
    key = _normalize_provider(args.provider)
    settings = load_settings()
    spec = PROVIDERS[key]

    outcome = spec.fetch(settings)
    if isinstance(outcome, Failure):
        logging.error("%s error: kind=%s", spec.name, outcome.kind)
        logging.error("Details: %s", outcome.error)
        raise SystemExit(1)

    logging.info(
        "Fetched %s canonical records from %s (attempts=%s)",
        _count_records(key, outcome.payload, settings),
        spec.name,
        outcome.attempts,
    )


if __name__ == "__main__":
    main()
