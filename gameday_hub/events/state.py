"""Lifecycle state of the selected event, recomputed on every run."""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo

from gameday_hub.events.selection import NextEventSelection, SelectionKind
from gameday_hub.ingestion.schema import EventState


def classify(
    now: datetime,
    selection: NextEventSelection,
    live_window: timedelta,
    local_tz: tzinfo,
) -> EventState:
    """Map a clock reading and a selection to IDLE, GAMEDAY, LIVE or FINAL.

    Rules in precedence order: no selection is IDLE; a recorded result is
    FINAL; kickoff <= now <= kickoff + live_window is LIVE; same local day
    before kickoff is GAMEDAY (never for a fallback pick); anything else is
    IDLE. A game past its live window without a result stays IDLE.
    """

    event = selection.event
    if selection.is_none or event is None:
        return EventState.IDLE
    if event.result is not None:
        return EventState.FINAL

    kickoff = event.start_time
    if kickoff <= now <= kickoff + live_window:
        return EventState.LIVE

    if selection.kind is not SelectionKind.FALLBACK and now < kickoff:
        if now.astimezone(local_tz).date() == kickoff.astimezone(local_tz).date():
            return EventState.GAMEDAY

    return EventState.IDLE
