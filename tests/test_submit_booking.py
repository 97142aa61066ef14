from __future__ import annotations

import asyncio
from datetime import datetime, timezone as dt_timezone
from zoneinfo import ZoneInfo

from slot_booking.application.exceptions import BackendTransportError
from slot_booking.application.ports.booking_backend import BackendReply, BookingBackendPort
from slot_booking.application.use_cases.submit_booking import (
    RATE_LIMITED_MESSAGE,
    SERVER_ERROR_MESSAGE,
    STALE_SLOT_MESSAGE,
    TRANSPORT_ERROR_MESSAGE,
    BookingSubmitter,
    build_booking_request,
)
from slot_booking.domain.entities.booking import BookingErrorKind
from slot_booking.domain.entities.contact_info import ContactInfo
from slot_booking.domain.entities.service_option import ServiceOption
from slot_booking.domain.entities.time_window import BookableSlot

PRAGUE = ZoneInfo("Europe/Prague")
SLOT = BookableSlot(
    datetime(2026, 11, 10, 9, 30, tzinfo=PRAGUE),
    datetime(2026, 11, 10, 10, 0, tzinfo=PRAGUE),
)
SERVICE = ServiceOption("Classic haircut", 30)
CONTACT = ContactInfo(name="Jana", email="jana@example.com")


class CannedBackend(BookingBackendPort):
    def __init__(self, reply: BackendReply | None = None, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def fetch_windows(self, identity):
        return []

    async def create_booking(self, request, identity):
        self.calls.append((request, identity))
        if self.error:
            raise self.error
        return self.reply

    async def cancel_booking(self, event_id, email):
        return BackendReply(status_code=200)


def _submit(backend, contact=CONTACT):
    return asyncio.run(BookingSubmitter(backend, PRAGUE).submit(SLOT, SERVICE, contact, "device-1"))


def test_request_body_uses_business_zone_and_trimmed_contact():
    utc_slot = BookableSlot(
        datetime(2026, 11, 10, 8, 30, tzinfo=dt_timezone.utc),
        datetime(2026, 11, 10, 9, 0, tzinfo=dt_timezone.utc),
    )

    request = build_booking_request(utc_slot, SERVICE, ContactInfo(" Jana ", " jana@example.com "), PRAGUE)

    assert request.to_wire() == {
        "slot": {"start": "2026-11-10T09:30:00+01:00", "end": "2026-11-10T10:00:00+01:00"},
        "customerInfo": {"name": "Jana", "email": "jana@example.com", "haircut": "Classic haircut"},
    }


def test_created_booking_is_confirmed():
    backend = CannedBackend(BackendReply(status_code=201, payload={"id": 42, "status": "confirmed"}))

    outcome = _submit(backend)

    assert outcome.succeeded
    assert outcome.refresh_windows
    assert outcome.confirmation.event_id == "42"
    assert outcome.confirmation.slot == SLOT
    assert outcome.confirmation.payload["status"] == "confirmed"
    assert backend.calls[0][1] == "device-1"


def test_success_without_identifier_still_confirms():
    outcome = _submit(CannedBackend(BackendReply(status_code=200, payload={})))

    assert outcome.succeeded
    assert outcome.confirmation.event_id is None


def test_not_found_means_stale_slot():
    outcome = _submit(CannedBackend(BackendReply(status_code=404, payload={"detail": "gone"})))

    assert outcome.error.kind is BookingErrorKind.STALE_SLOT
    assert outcome.error.message == STALE_SLOT_MESSAGE
    assert outcome.refresh_windows


def test_too_many_requests_is_rate_limited():
    outcome = _submit(CannedBackend(BackendReply(status_code=429, payload={})))

    assert outcome.error.kind is BookingErrorKind.RATE_LIMITED
    assert outcome.error.message == RATE_LIMITED_MESSAGE
    assert not outcome.refresh_windows


def test_server_error_detail_is_passed_through():
    outcome = _submit(CannedBackend(BackendReply(status_code=400, payload={"detail": "Email is blocked"})))
    assert outcome.error.kind is BookingErrorKind.SERVER_ERROR
    assert outcome.error.message == "Email is blocked"

    outcome = _submit(CannedBackend(BackendReply(status_code=422, payload={"detail": [{"msg": "bad slot"}]})))
    assert "bad slot" in outcome.error.message

    outcome = _submit(CannedBackend(BackendReply(status_code=500, payload={"detail": "   "})))
    assert outcome.error.message == SERVER_ERROR_MESSAGE


def test_no_response_is_transport_error():
    outcome = _submit(CannedBackend(error=BackendTransportError("timed out")))

    assert outcome.error.kind is BookingErrorKind.TRANSPORT_ERROR
    assert outcome.error.message == TRANSPORT_ERROR_MESSAGE
    assert not outcome.refresh_windows


def test_invalid_contact_is_not_sent():
    backend = CannedBackend(BackendReply(status_code=201))

    outcome = _submit(backend, ContactInfo(name="Jana", email="not-an-email"))

    assert outcome.error.kind is BookingErrorKind.VALIDATION
    assert outcome.error.field_errors == {"email": "Please enter a valid email."}
    assert backend.calls == []
