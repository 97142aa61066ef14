from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from slot_booking.domain.entities.contact_info import ContactInfo
from slot_booking.domain.entities.time_window import BookableSlot


class BookingErrorKind(str, Enum):
    VALIDATION = "validation"
    STALE_SLOT = "stale_slot"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class BookingError:
    kind: BookingErrorKind
    message: str
    status_code: int | None = None
    field_errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BookingConfirmation:
    slot: BookableSlot
    service_name: str
    contact: ContactInfo
    event_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)  # echoed booking body


@dataclass(frozen=True)
class BookingOutcome:
    """What the submitter learned from one create-booking exchange."""

    confirmation: BookingConfirmation | None = None
    error: BookingError | None = None
    refresh_windows: bool = False

    @property
    def succeeded(self) -> bool:
        return self.confirmation is not None
