"""Pick the single next or current event out of a season schedule."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Sequence

from gameday_hub.ingestion.schema import EventRecord


class SelectionKind(str, Enum):
    CURRENT = "current"
    NEXT = "next"
    FALLBACK = "fallback"
    NONE = "none"


@dataclass(frozen=True)
class NextEventSelection:
    kind: SelectionKind
    event: EventRecord | None = None

    @property
    def is_none(self) -> bool:
        return self.kind is SelectionKind.NONE

    @property
    def is_genuine(self) -> bool:
        """True for a current or upcoming pick, False for fallback and none."""
        return self.kind in (SelectionKind.CURRENT, SelectionKind.NEXT)


NO_SELECTION = NextEventSelection(SelectionKind.NONE)


def select_next_event(
    events: Sequence[EventRecord],
    now: datetime,
    live_window: timedelta | None = None,
) -> NextEventSelection:
    """Select the event a display should show.

    ``events`` must already be sorted by start time (stably, so equal start
    times keep provider order). Order of preference:

    1. with ``live_window``: the earliest unresolved event whose live window
       contains ``now`` (``current``);
    2. the earliest unresolved event starting strictly after ``now`` (``next``);
    3. the chronologically last event, resolved or not (``fallback``).

    An empty list gives ``none``.
    """

    if not events:
        return NO_SELECTION

    if live_window is not None:
        for event in events:
            if event.result is None and event.start_time <= now <= event.start_time + live_window:
                return NextEventSelection(SelectionKind.CURRENT, event)

    for event in events:
        if event.start_time > now and event.result is None:
            return NextEventSelection(SelectionKind.NEXT, event)

    # Last by time; max() keeps the first of equal maxima, matching stable order.
    latest = max(events, key=lambda event: event.start_time)
    return NextEventSelection(SelectionKind.FALLBACK, latest)
