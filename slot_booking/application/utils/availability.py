from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from zoneinfo import ZoneInfo

from slot_booking.domain.entities.time_window import OpenWindow, local_day


def drop_past_windows(windows: Iterable[OpenWindow], now: datetime | None = None) -> list[OpenWindow]:
    """Keep windows that still have time left after `now`."""
    if now is None:
        return list(windows)
    return [w for w in windows if w.end.timestamp() > now.timestamp()]


def window_day(window: OpenWindow, timezone: ZoneInfo, now: datetime | None = None) -> date:
    """Business-zone calendar day a window belongs to.

    A window already in progress counts from `now`, not from its original start.
    """
    start = window.start
    if now is not None and now.timestamp() > start.timestamp():
        start = now
    return local_day(start, timezone)


def available_dates(
    windows: Iterable[OpenWindow],
    timezone: ZoneInfo,
    now: datetime | None = None,
) -> frozenset[date]:
    """Calendar days touched by at least one open window.

    A day is listed even if none of its windows fits any service; the slot
    generator reports that case.
    """
    return frozenset(window_day(w, timezone, now) for w in drop_past_windows(windows, now))
