"""Validate already-published snapshot files against their contracts."""

from __future__ import annotations

import argparse
import logging

from gameday_hub.publish.store import SnapshotStore
from gameday_hub.publish.validation import validate_published
from gameday_hub.settings import load_settings


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Check every published JSON file (and specials.json) against its contract.",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        help="Directory holding the published files (default: $DATA_DIR or ./data).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = _parse_args(argv)
    settings = load_settings()
    store = SnapshotStore(args.data_dir or settings.data_dir)

    report = validate_published(store, settings)
    for name, check in report.checks.items():
        if check.ok:
            logging.info("%s is valid.", store.path_for(name))
        else:
            for error in check.errors:
                logging.error("%s: %s", store.path_for(name), error)

    if report.rejected:
        logging.error("Validation errors found in: %s", ", ".join(report.rejected))
        return 1
    logging.info("All data files valid.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
