"""CLI entrypoint for scheduled snapshot runs."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from datetime import datetime, timezone

from gameday_hub.ingestion.schedule_parser import parse_instant
from gameday_hub.ingestion.sync import PipelineAborted, sync_snapshot
from gameday_hub.settings import load_settings


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch schedule, weather and places, then publish the JSON snapshot.",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        help="Directory for published JSON files (default: $DATA_DIR or ./data).",
    )
    parser.add_argument(
        "--now",
        type=str,
        help="Override the clock with an ISO-8601 timestamp (for replaying a run).",
    )
    return parser.parse_args(argv)


def _resolve_now(raw: str | None) -> datetime:
    if not raw:
        return datetime.now(timezone.utc)
    parsed = parse_instant(raw)
    if parsed is None:
        raise SystemExit(f"--now must be an ISO-8601 timestamp with a time, got {raw!r}")
    return parsed


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2
    if args.data_dir:
        settings = replace(settings, data_dir=args.data_dir)
    now = _resolve_now(args.now)

    logging.info(
        "Starting snapshot run team=%s year=%s data_dir=%s",
        settings.tracked_team,
        settings.season_year,
        settings.data_dir,
    )
    try:
        result = sync_snapshot(settings, now=now)
    except PipelineAborted as exc:
        logging.error("Run aborted: %s", exc)
        return 1

    logging.info(
        "Done: state=%s selection=%s collections=%s degraded=%s",
        result.state.value,
        result.selection,
        ",".join(f"{name}={status}" for name, status in result.collections.items()),
        ",".join(result.degraded) or "none",
    )
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
