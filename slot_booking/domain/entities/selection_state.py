from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from slot_booking.domain.entities.booking import BookingConfirmation, BookingError
from slot_booking.domain.entities.contact_info import ContactInfo
from slot_booking.domain.entities.service_option import ServiceOption
from slot_booking.domain.entities.time_window import BookableSlot, OpenWindow


class Phase(str, Enum):
    NO_DATE = "no_date"
    DATE_CHOSEN = "date_chosen"
    SERVICE_CHOSEN = "service_chosen"
    TIME_CHOSEN = "time_chosen"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    ERROR = "error"


class AvailabilityStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class SelectionState:
    windows: tuple[OpenWindow, ...] = ()
    services: tuple[ServiceOption, ...] = ()
    chosen_date: date | None = None
    service: ServiceOption | None = None
    slot: BookableSlot | None = None
    slots: tuple[BookableSlot, ...] = ()  # derived from windows, chosen_date and service
    contact: ContactInfo = ContactInfo()
    submission_status: SubmissionStatus = SubmissionStatus.IDLE
    last_error: BookingError | None = None
    confirmation: BookingConfirmation | None = None
    availability_status: AvailabilityStatus = AvailabilityStatus.IDLE
    availability_error: str | None = None
    catalog_error: str | None = None
    redirect_url: str | None = None
    windows_fetched_at: datetime | None = None

    @property
    def phase(self) -> Phase:
        if self.submission_status is SubmissionStatus.SUBMITTING:
            return Phase.SUBMITTING
        if self.submission_status is SubmissionStatus.SUCCEEDED:
            return Phase.SUCCEEDED
        if self.submission_status is SubmissionStatus.ERROR:
            return Phase.FAILED
        return self.selection_phase

    @property
    def selection_phase(self) -> Phase:
        """How far the selection itself has progressed, ignoring submission."""
        if self.chosen_date is None:
            return Phase.NO_DATE
        if self.service is None:
            return Phase.DATE_CHOSEN
        if self.slot is None:
            return Phase.SERVICE_CHOSEN
        return Phase.TIME_CHOSEN
