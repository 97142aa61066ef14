from __future__ import annotations

import logging
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from slot_booking.application.dto.backend import BookingRequestDTO, CustomerInfoDTO, ErrorBodyDTO, SlotDTO
from slot_booking.application.exceptions import BackendTransportError
from slot_booking.application.ports.booking_backend import BackendReply, BookingBackendPort
from slot_booking.domain.entities.booking import (
    BookingConfirmation,
    BookingError,
    BookingErrorKind,
    BookingOutcome,
)
from slot_booking.domain.entities.contact_info import ContactInfo
from slot_booking.domain.entities.service_option import ServiceOption
from slot_booking.domain.entities.time_window import BookableSlot

VALIDATION_MESSAGE = "Please fill in all required fields."
STALE_SLOT_MESSAGE = "The available times have changed. Please pick a time again."
RATE_LIMITED_MESSAGE = "Too many booking attempts. Please wait an hour and try again."
SERVER_ERROR_MESSAGE = "The booking could not be completed. Please try again later."
TRANSPORT_ERROR_MESSAGE = (
    "We did not get an answer from the booking server. Your booking may still have been "
    "created, so check your email before trying again."
)


def build_booking_request(
    slot: BookableSlot,
    service: ServiceOption,
    contact: ContactInfo,
    timezone: ZoneInfo,
) -> BookingRequestDTO:
    contact = contact.normalized()
    return BookingRequestDTO(
        slot=SlotDTO(
            start=slot.start.astimezone(timezone).isoformat(),
            end=slot.end.astimezone(timezone).isoformat(),
        ),
        customer_info=CustomerInfoDTO(name=contact.name, email=contact.email, haircut=service.name),
    )


class BookingSubmitter:
    """
    Runs the create-booking exchange and classifies the reply.

    Never retries. Every transport failure is turned into a BookingError, so
    callers only ever see a BookingOutcome.
    """

    def __init__(self, backend: BookingBackendPort, timezone: ZoneInfo) -> None:
        self._backend = backend
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def validate(self, contact: ContactInfo) -> BookingError | None:
        field_errors = contact.validate()
        if not field_errors:
            return None
        return BookingError(
            kind=BookingErrorKind.VALIDATION,
            message=VALIDATION_MESSAGE,
            field_errors=field_errors,
        )

    async def submit(
        self,
        slot: BookableSlot,
        service: ServiceOption,
        contact: ContactInfo,
        identity: str,
    ) -> BookingOutcome:
        invalid = self.validate(contact)
        if invalid:
            return BookingOutcome(error=invalid)

        request = build_booking_request(slot, service, contact, self._timezone)
        try:
            reply = await self._backend.create_booking(request, identity)
        except BackendTransportError as e:
            self._logger.warning(
                "Booking request got no response",
                extra={"slot_start": request.slot.start, "reason": str(e)},
            )
            return BookingOutcome(
                error=BookingError(kind=BookingErrorKind.TRANSPORT_ERROR, message=TRANSPORT_ERROR_MESSAGE)
            )

        return self._classify(reply, slot, service, contact)

    def _classify(
        self,
        reply: BackendReply,
        slot: BookableSlot,
        service: ServiceOption,
        contact: ContactInfo,
    ) -> BookingOutcome:
        if reply.ok:
            event_id = reply.payload.get("event_id") or reply.payload.get("id")
            self._logger.info(
                "Booking accepted",
                extra={"status": reply.status_code, "slot_start": slot.start.isoformat(), "service": service.name},
            )
            return BookingOutcome(
                confirmation=BookingConfirmation(
                    slot=slot,
                    service_name=service.name,
                    contact=contact.normalized(),
                    event_id=str(event_id) if event_id else None,
                    payload=dict(reply.payload),
                ),
                refresh_windows=True,
            )

        if reply.status_code == 404:
            kind, message, refresh = BookingErrorKind.STALE_SLOT, STALE_SLOT_MESSAGE, True
        elif reply.status_code == 429:
            kind, message, refresh = BookingErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE, False
        else:
            kind, message, refresh = BookingErrorKind.SERVER_ERROR, _server_message(reply), False

        self._logger.warning(
            "Booking rejected",
            extra={"status": reply.status_code, "error_kind": kind.value, "slot_start": slot.start.isoformat()},
        )
        return BookingOutcome(
            error=BookingError(kind=kind, message=message, status_code=reply.status_code),
            refresh_windows=refresh,
        )


def _server_message(reply: BackendReply) -> str:
    try:
        detail = ErrorBodyDTO.model_validate(reply.payload).detail
    except ValidationError:
        detail = None
    return detail.strip() if detail and detail.strip() else SERVER_ERROR_MESSAGE
