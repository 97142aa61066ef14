from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class OpenWindow:
    """Contiguous span reported by the backend as free for appointments."""

    start: datetime
    end: datetime
    source_id: str | None = None  # backend event_id, if any

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("OpenWindow instants must be timezone-aware")
        if self.end.timestamp() < self.start.timestamp():
            raise ValueError("OpenWindow end must not be before start")

    def contains(self, start: datetime, end: datetime) -> bool:
        return self.start.timestamp() <= start.timestamp() and end.timestamp() <= self.end.timestamp()


@dataclass(frozen=True, eq=False)
class BookableSlot:
    start: datetime
    end: datetime
    source_id: str | None = None

    # Same-zone datetimes compare by wall time and ignore DST fold; slots compare by instant.
    def _key(self) -> tuple[float, float, str | None]:
        return (self.start.timestamp(), self.end.timestamp(), self.source_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BookableSlot):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @property
    def duration_minutes(self) -> int:
        return int((self.end.timestamp() - self.start.timestamp()) // 60)


def to_business_zone(value: datetime, timezone: ZoneInfo) -> datetime:
    """Naive values are business wall time; aware values are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone)
    return value.astimezone(timezone)


def local_day(value: datetime, timezone: ZoneInfo) -> date:
    return to_business_zone(value, timezone).date()


def parse_calendar_day(text: str) -> date:
    """Parse a YYYY-MM-DD calendar-day string."""
    return date.fromisoformat(text.strip())
