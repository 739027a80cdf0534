from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Response
from pydantic import ValidationError

from gameday_hub.ingestion.places_parser import map_pins
from gameday_hub.publish.store import SnapshotStore
from gameday_hub.publish.validation import PLACES_CONTRACT, places_payload

app = FastAPI(title="Gameday Hub (read-only snapshot)")
logger = logging.getLogger(__name__)


def get_store() -> SnapshotStore:
    return SnapshotStore(os.getenv("DATA_DIR", "data"))


def _published(store: SnapshotStore, name: str, response: Response) -> Any:
    payload = store.read(name)
    if payload is None:
        raise HTTPException(status_code=404, detail=f"{name} has not been published")
    response.headers["Cache-Control"] = "no-store"
    return payload


@app.get("/healthz")
def healthz(store: SnapshotStore = Depends(get_store)):
    meta = store.read("metadata")
    return {
        "ok": True,
        "published_at": meta.get("published_at") if isinstance(meta, dict) else None,
    }


@app.get("/api/schedule")
def api_schedule(response: Response, store: SnapshotStore = Depends(get_store)):
    return _published(store, "events", response)


@app.get("/api/next")
def api_next(response: Response, store: SnapshotStore = Depends(get_store)):
    return _published(store, "next", response)


@app.get("/api/weather")
def api_weather(response: Response, store: SnapshotStore = Depends(get_store)):
    return _published(store, "forecast", response)


@app.get("/api/places")
def api_places(
    response: Response,
    pins: bool = False,
    store: SnapshotStore = Depends(get_store),
):
    payload = _published(store, "places", response)
    if not pins:
        return payload
    try:
        places = PLACES_CONTRACT.validate_python(payload)
    except ValidationError:
        logger.exception("Published places failed validation")
        raise HTTPException(status_code=503, detail="places snapshot is invalid")
    return places_payload(map_pins(places))


@app.get("/api/meta")
def api_meta(response: Response, store: SnapshotStore = Depends(get_store)):
    return _published(store, "metadata", response)
