"""Canonical record contracts shared by canonicalizers, validator and publisher."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Literal, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator


class EventState(str, Enum):
    IDLE = "IDLE"
    GAMEDAY = "GAMEDAY"
    LIVE = "LIVE"
    FINAL = "FINAL"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class EventRecord(_Record):
    """A scheduled game, seen from the tracked team's side."""

    start_time: AwareDatetime
    opponent_name: str = Field(min_length=1)
    # None means home/away could not be resolved.
    is_home: Optional[bool] = None
    broadcast_channel: Optional[str] = None
    result: Optional[str] = Field(default=None, pattern=r"^\d+-\d+$")
    venue: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def _to_utc(cls, value: dt.datetime) -> dt.datetime:
        return value.astimezone(dt.timezone.utc)


class PublishedNextEvent(EventRecord):
    selection: Literal["current", "next", "fallback"]
    state: EventState


class ForecastDayRecord(_Record):
    date: dt.date
    high_temp: float
    low_temp: float
    precipitation_chance: int = Field(ge=0, le=100)


class Coordinates(_Record):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class PlaceRecord(_Record):
    name: str = Field(min_length=1)
    # Provider-native id; places without one are told apart by name and address.
    provider_id: Optional[str] = None
    area_label: Optional[str] = None
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    website: Optional[str] = Field(default=None, pattern=r"(?i)^https?://\S+$")


class SpecialRecord(_Record):
    """Community-maintained special; read and validated, never written."""

    title: str = Field(min_length=1)
    business: str = ""
    area: str = ""
    time_window: str = ""
    url: Optional[str] = None


CollectionStatus = Literal["published", "unchanged", "rejected"]


class PublicationMetadata(_Record):
    published_at: AwareDatetime
    provider_provenance: dict[str, Optional[str]]
    source_year: int
    collections: dict[str, CollectionStatus] = Field(default_factory=dict)
