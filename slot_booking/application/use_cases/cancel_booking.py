from __future__ import annotations

import logging
from dataclasses import dataclass

from slot_booking.application.exceptions import BackendTransportError
from slot_booking.application.ports.booking_backend import BookingBackendPort


@dataclass(frozen=True)
class CancelResult:
    status: str  # "success", "error", "invalid"
    message: str


class CancelBookingUseCase:
    """Cancel one booking from the link sent in the confirmation email."""

    def __init__(self, backend: BookingBackendPort) -> None:
        self._backend = backend
        self._logger = logging.getLogger(__name__)

    async def cancel(self, event_id: str | None, email: str | None) -> CancelResult:
        event_id = (event_id or "").strip()
        email = (email or "").strip()
        if not event_id or not email:
            return CancelResult(status="invalid", message="Invalid cancellation link.")

        try:
            reply = await self._backend.cancel_booking(event_id, email)
        except BackendTransportError as e:
            self._logger.error("Cancellation request failed", extra={"reason": str(e)})
            return CancelResult(status="error", message="The booking could not be cancelled.")

        if reply.ok:
            self._logger.info("Booking cancelled", extra={"status": reply.status_code})
            return CancelResult(status="success", message="Your booking has been cancelled.")

        self._logger.warning("Cancellation rejected", extra={"status": reply.status_code})
        return CancelResult(status="error", message="The booking could not be cancelled.")
