from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from slot_booking.application.dto.backend import BookingRequestDTO
from slot_booking.application.exceptions import BackendRateLimitedError
from slot_booking.application.ports.booking_backend import BackendReply, BookingBackendPort
from slot_booking.domain.entities.time_window import OpenWindow, to_business_zone


class MockBookingBackend(BookingBackendPort):
    """In-memory stand-in for the booking backend, used in dev and tests."""

    def __init__(
        self,
        windows: list[OpenWindow] | None = None,
        timezone: ZoneInfo | None = None,
        max_bookings_per_identity: int | None = None,
    ) -> None:
        self._timezone = timezone or ZoneInfo("Europe/Prague")
        self._windows: list[OpenWindow] = list(windows or [])
        self._bookings: dict[str, tuple[OpenWindow, str]] = {}
        self._bookings_by_identity: dict[str, int] = {}
        self._max_bookings = max_bookings_per_identity
        self.rate_limited = False
        self.fetch_count = 0
        self.booking_requests: list[tuple[BookingRequestDTO, str]] = []
        self._logger = logging.getLogger(__name__)

    @classmethod
    def with_working_days(
        cls,
        start_day: date,
        days: int,
        timezone: ZoneInfo,
        opening: time = time(9, 0),
        closing: time = time(17, 0),
        **kwargs,
    ) -> "MockBookingBackend":
        windows = []
        for offset in range(days):
            day = start_day + timedelta(days=offset)
            if day.weekday() >= 5:
                continue
            windows.append(
                OpenWindow(
                    start=datetime.combine(day, opening, tzinfo=timezone),
                    end=datetime.combine(day, closing, tzinfo=timezone),
                    source_id=f"mock_window_{day.isoformat()}",
                )
            )
        return cls(windows=windows, timezone=timezone, **kwargs)

    @property
    def windows(self) -> list[OpenWindow]:
        return list(self._windows)

    async def fetch_windows(self, identity: str) -> list[OpenWindow]:
        self.fetch_count += 1
        if self.rate_limited:
            raise BackendRateLimitedError("Mock backend is rate limiting")
        return list(self._windows)

    async def create_booking(self, request: BookingRequestDTO, identity: str) -> BackendReply:
        self.booking_requests.append((request, identity))
        if self.rate_limited:
            return BackendReply(status_code=429, payload={"detail": "Too many requests"})
        if self._max_bookings is not None and self._bookings_by_identity.get(identity, 0) >= self._max_bookings:
            return BackendReply(status_code=429, payload={"detail": "Too many requests"})

        start = to_business_zone(datetime.fromisoformat(request.slot.start), self._timezone)
        end = to_business_zone(datetime.fromisoformat(request.slot.end), self._timezone)
        window = next((w for w in self._windows if w.contains(start, end)), None)
        if window is None:
            return BackendReply(status_code=404, payload={"detail": "Slot is no longer available"})

        self._windows.remove(window)
        if window.start.timestamp() < start.timestamp():
            self._windows.append(OpenWindow(start=window.start, end=start, source_id=window.source_id))
        if end.timestamp() < window.end.timestamp():
            self._windows.append(OpenWindow(start=end, end=window.end, source_id=window.source_id))
        self._windows.sort(key=lambda w: w.start.timestamp())

        event_id = f"mock_event_{len(self._bookings) + 1}"
        booked = OpenWindow(start=start, end=end, source_id=window.source_id)
        self._bookings[event_id] = (booked, request.customer_info.email)
        self._bookings_by_identity[identity] = self._bookings_by_identity.get(identity, 0) + 1
        self._logger.info(
            "Mock booking created",
            extra={"slot_start": start.isoformat(), "service": request.customer_info.haircut},
        )
        return BackendReply(status_code=201, payload={"event_id": event_id, **request.to_wire()})

    async def cancel_booking(self, event_id: str, email: str) -> BackendReply:
        booking = self._bookings.get(event_id)
        if booking is None or booking[1].lower() != email.lower():
            return BackendReply(status_code=404, payload={"detail": "Booking not found"})

        del self._bookings[event_id]
        self._windows.append(booking[0])
        self._windows.sort(key=lambda w: w.start.timestamp())
        self._logger.info("Mock booking cancelled", extra={"reason": event_id})
        return BackendReply(status_code=200, payload={"event_id": event_id, "status": "cancelled"})
