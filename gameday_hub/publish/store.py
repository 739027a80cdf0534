"""File-backed snapshot storage with change detection and atomic replace."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ARTIFACTS: dict[str, str] = {
    "events": "schedule.json",
    "next": "next.json",
    "forecast": "weather.json",
    "places": "places.json",
    "metadata": "meta.json",
    "specials": "specials.json",
}


def serialize(payload: Any) -> bytes:
    """Deterministic JSON encoding used for both comparison and writing."""

    text = json.dumps(payload, sort_keys=True, indent=2, ensure_ascii=False)
    return (text + "\n").encode("utf-8")


class SnapshotStore:
    """One JSON file per collection under ``data_dir``.

    Writers go through a temp file in the same directory followed by
    ``os.replace``, so readers see either the old or the new file.
    """

    def __init__(self, data_dir: str | os.PathLike[str]) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, name: str) -> Path:
        try:
            return self.data_dir / ARTIFACTS[name]
        except KeyError:
            raise KeyError(f"Unknown snapshot collection: {name}") from None

    def read_bytes(self, name: str) -> bytes | None:
        path = self.path_for(name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def read(self, name: str) -> Any:
        raw = self.read_bytes(name)
        if raw is None:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.error("Published snapshot is not valid JSON: %s", self.path_for(name))
            return None

    def write(self, name: str, payload: Any) -> bool:
        """Write ``payload`` unless the stored bytes already match.

        Returns True when the file was replaced.
        """

        encoded = serialize(payload)
        if self.read_bytes(name) == encoded:
            logger.info("Snapshot unchanged collection=%s", name)
            return False
        self._atomic_write(self.path_for(name), encoded)
        logger.info("Snapshot written collection=%s bytes=%s", name, len(encoded))
        return True

    def write_metadata(self, payload: Any) -> None:
        """Always rewrite metadata so its timestamp reflects the latest check."""

        self._atomic_write(self.path_for("metadata"), serialize(payload))

    def _atomic_write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
