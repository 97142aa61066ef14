from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from slot_booking.application.utils.availability import drop_past_windows, window_day
from slot_booking.domain.entities.time_window import BookableSlot, OpenWindow

SLOT_STEP_MINUTES = 30

_UTC = ZoneInfo("UTC")


def generate_slots(
    windows: Iterable[OpenWindow],
    day: date,
    duration_minutes: int,
    timezone: ZoneInfo,
    now: datetime | None = None,
) -> list[BookableSlot]:
    """
    Cut the windows of one business-zone day into bookable slots.

    Every slot lasts exactly `duration_minutes`; candidate starts advance by
    SLOT_STEP_MINUTES from each window's start regardless of the duration.
    When `now` is given, windows that are over and slots starting before it
    are left out. Inputs are not modified.
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")

    duration = timedelta(minutes=duration_minutes)
    slots: list[BookableSlot] = []
    for window in drop_past_windows(windows, now):
        if window_day(window, timezone, now) != day:
            continue
        slots.extend(_cut_window(window, duration, timezone, now))

    return sorted(slots, key=lambda s: (s.start.timestamp(), s.source_id or ""))


def _cut_window(
    window: OpenWindow,
    duration: timedelta,
    timezone: ZoneInfo,
    now: datetime | None,
) -> Iterator[BookableSlot]:
    # Arithmetic in UTC: a slot spans real elapsed time across DST changes.
    step = timedelta(minutes=SLOT_STEP_MINUTES)
    cursor = window.start.astimezone(_UTC)
    window_end = window.end.astimezone(_UTC)
    while cursor + duration <= window_end:
        if now is None or cursor >= now:
            yield BookableSlot(
                start=cursor.astimezone(timezone),
                end=(cursor + duration).astimezone(timezone),
                source_id=window.source_id,
            )
        cursor += step
