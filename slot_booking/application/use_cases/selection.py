from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from zoneinfo import ZoneInfo

from slot_booking.application.exceptions import (
    BackendRateLimitedError,
    BackendTransportError,
    BackendUnavailableError,
    CatalogUnavailableError,
    InvalidTransitionError,
    UnavailableDateError,
    UnavailableSlotError,
    UnknownServiceError,
)
from slot_booking.application.ports.booking_backend import BookingBackendPort
from slot_booking.application.ports.identity import IdentityProviderPort
from slot_booking.application.ports.service_catalog import ServiceCatalogPort
from slot_booking.application.use_cases.submit_booking import BookingSubmitter
from slot_booking.application.utils.availability import available_dates
from slot_booking.application.utils.slot_generator import generate_slots
from slot_booking.domain.entities.booking import BookingConfirmation, BookingError, BookingErrorKind, BookingOutcome
from slot_booking.domain.entities.contact_info import ContactInfo
from slot_booking.domain.entities.selection_state import (
    AvailabilityStatus,
    Phase,
    SelectionState,
    SubmissionStatus,
)
from slot_booking.domain.entities.service_option import ServiceOption
from slot_booking.domain.entities.time_window import BookableSlot, OpenWindow

WINDOWS_ERROR_MESSAGE = "Available times could not be loaded. Please try again."
WINDOWS_BLOCKED_MESSAGE = "Too many requests from this device. Please wait and try again later."
CATALOG_ERROR_MESSAGE = "The list of services could not be loaded. Please try again."

StateListener = Callable[[SelectionState], None]


class SuccessPolicy(str, Enum):
    REDIRECT = "redirect"
    RESET_IN_PLACE = "reset_in_place"


class RateLimitPolicy(str, Enum):
    REDIRECT = "redirect"
    INLINE = "inline"


@dataclass(frozen=True)
class SubmissionResult:
    action: str  # "booked", "invalid", "stale_slot", "rate_limited", "failed"
    confirmation: BookingConfirmation | None = None
    error: BookingError | None = None
    redirect_url: str | None = None


class BookingCoordinator:
    """
    Single source of truth for one customer's date -> service -> time -> contact flow.

    Transitions run to completion before the next event is handled. Whenever
    windows change, dependent choices are cleared in the order time, service,
    date so nothing is left pointing at data that no longer exists.
    """

    def __init__(
        self,
        backend: BookingBackendPort,
        catalog: ServiceCatalogPort,
        identity: IdentityProviderPort,
        timezone: ZoneInfo,
        submitter: BookingSubmitter | None = None,
        on_success: SuccessPolicy = SuccessPolicy.REDIRECT,
        on_rate_limited: RateLimitPolicy = RateLimitPolicy.REDIRECT,
        success_redirect_url: str = "/uspesnarezervace",
        blocked_redirect_url: str = "/blocked",
        discard_out_of_order_fetches: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._backend = backend
        self._catalog = catalog
        self._identity = identity
        self._timezone = timezone
        self._submitter = submitter or BookingSubmitter(backend, timezone)
        self._on_success = SuccessPolicy(on_success)
        self._on_rate_limited = RateLimitPolicy(on_rate_limited)
        self._success_redirect_url = success_redirect_url
        self._blocked_redirect_url = blocked_redirect_url
        self._discard_out_of_order = discard_out_of_order_fetches
        self._clock = clock or (lambda: datetime.now(timezone))
        self._state = SelectionState()
        self._listeners: list[StateListener] = []
        self._fetch_seq = 0
        self._applied_seq = 0
        self._logger = logging.getLogger(__name__)

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def timezone(self) -> ZoneInfo:
        return self._timezone

    @property
    def available_dates(self) -> frozenset[date]:
        return available_dates(self._state.windows, self._timezone, self._clock())

    @property
    def slots(self) -> tuple[BookableSlot, ...]:
        return self._state.slots

    @property
    def services(self) -> tuple[ServiceOption, ...]:
        return self._state.services

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call `listener` with every new state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- selection transitions -------------------------------------------------

    def choose_date(self, day: date) -> SelectionState:
        self._ensure_not_submitting()
        if day not in self.available_dates:
            raise UnavailableDateError(f"No open windows on {day.isoformat()}")

        self._logger.info("Date chosen", extra={"date": day.isoformat()})
        return self._set_state(
            replace(
                self._state,
                chosen_date=day,
                service=None,
                slot=None,
                slots=(),
                submission_status=SubmissionStatus.IDLE,
                last_error=None,
                confirmation=None,
                redirect_url=None,
            )
        )

    def choose_service(self, name: str) -> SelectionState:
        self._ensure_not_submitting()
        state = self._state
        if state.chosen_date is None:
            raise InvalidTransitionError("Choose a date before choosing a service")
        service = self._find_service(name)

        slots = self._derive_slots(state.windows, state.chosen_date, service)
        self._logger.info("Service chosen", extra={"service": service.name, "date": state.chosen_date.isoformat()})
        return self._set_state(
            replace(
                state,
                service=service,
                slot=None,
                slots=slots,
                submission_status=SubmissionStatus.IDLE,
                last_error=None,
            )
        )

    def choose_time(self, slot: BookableSlot) -> SelectionState:
        self._ensure_not_submitting()
        state = self._state
        if state.service is None:
            raise InvalidTransitionError("Choose a service before choosing a time")
        if slot not in state.slots:
            raise UnavailableSlotError(f"{slot.start.isoformat()} is not among the offered times")

        self._logger.info("Time chosen", extra={"slot_start": slot.start.isoformat()})
        return self._set_state(
            replace(state, slot=slot, submission_status=SubmissionStatus.IDLE, last_error=None)
        )

    def find_slot(self, start: datetime) -> BookableSlot | None:
        for slot in self._state.slots:
            if slot.start.timestamp() == start.timestamp():
                return slot
        return None

    def update_contact(self, name: str | None = None, email: str | None = None) -> SelectionState:
        self._ensure_not_submitting()
        contact = self._state.contact
        contact = ContactInfo(
            name=contact.name if name is None else name,
            email=contact.email if email is None else email,
        )
        return self._set_state(replace(self._state, contact=contact))

    def refresh_windows(self, windows: Iterable[OpenWindow]) -> SelectionState:
        """Replace the windows and clear every choice they no longer support."""
        now = self._clock()
        state = replace(
            self._state,
            windows=tuple(windows),
            windows_fetched_at=now,
            availability_status=AvailabilityStatus.READY,
            availability_error=None,
        )

        if state.chosen_date is not None:
            if state.chosen_date not in available_dates(state.windows, self._timezone, now):
                self._logger.info("Chosen date no longer available", extra={"date": state.chosen_date.isoformat()})
                state = replace(state, chosen_date=None, service=None, slot=None, slots=())
            elif state.service is not None:
                slots = self._derive_slots(state.windows, state.chosen_date, state.service)
                if state.slot is not None and state.slot not in slots:
                    self._logger.info(
                        "Chosen time no longer available",
                        extra={"slot_start": state.slot.start.isoformat()},
                    )
                    state = replace(state, slots=slots, slot=None)
                else:
                    state = replace(state, slots=slots)

        return self._set_state(state)

    # -- network operations ----------------------------------------------------

    async def load(self) -> SelectionState:
        """Load the service catalog once, then the windows."""
        if not self._state.services:
            await self._load_catalog()
        return await self.refresh()

    async def refresh(self) -> SelectionState:
        """Refetch windows. Failures leave the previous windows in place."""
        self._fetch_seq += 1
        seq = self._fetch_seq
        if self._state.windows_fetched_at is None:
            self._set_state(replace(self._state, availability_status=AvailabilityStatus.LOADING))

        try:
            windows = await self._backend.fetch_windows(self._identity.get_identity())
        except BackendRateLimitedError as e:
            if self._superseded(seq):
                return self._state
            self._logger.warning("Windows fetch rate limited", extra={"reason": str(e)})
            redirect = self._state.redirect_url
            # a finished booking keeps pointing at its confirmation page
            if self._state.submission_status is not SubmissionStatus.SUCCEEDED:
                redirect = self._blocked_redirect_url if self._on_rate_limited is RateLimitPolicy.REDIRECT else None
            return self._set_state(
                replace(
                    self._state,
                    availability_status=AvailabilityStatus.BLOCKED,
                    availability_error=WINDOWS_BLOCKED_MESSAGE,
                    redirect_url=redirect,
                )
            )
        except (BackendUnavailableError, BackendTransportError) as e:
            if self._superseded(seq):
                return self._state
            self._logger.error("Windows fetch failed", extra={"reason": str(e)})
            return self._set_state(
                replace(
                    self._state,
                    availability_status=AvailabilityStatus.ERROR,
                    availability_error=WINDOWS_ERROR_MESSAGE,
                )
            )

        if self._superseded(seq):
            self._logger.debug("Discarding out-of-order windows response", extra={"reason": f"seq={seq}"})
            return self._state
        return self.refresh_windows(windows)

    async def refresh_if_stale(self, max_age_seconds: float) -> SelectionState:
        state = self._state
        if state.submission_status is SubmissionStatus.SUBMITTING:
            return state
        fetched_at = state.windows_fetched_at
        if fetched_at is not None and (self._clock() - fetched_at).total_seconds() < max_age_seconds:
            return state
        return await self.refresh()

    async def submit(self, contact: ContactInfo | None = None) -> SubmissionResult:
        state = self._state
        if state.submission_status is SubmissionStatus.SUBMITTING:
            raise InvalidTransitionError("A booking is already being submitted")
        if state.slot is None or state.service is None:
            raise InvalidTransitionError("Choose a time before submitting")

        if contact is not None:
            state = self._set_state(replace(state, contact=contact))
        invalid = self._submitter.validate(state.contact)
        if invalid:
            self._set_state(replace(state, last_error=invalid))
            return SubmissionResult(action="invalid", error=invalid)

        identity = self._identity.get_identity()
        self._set_state(
            replace(state, submission_status=SubmissionStatus.SUBMITTING, last_error=None, redirect_url=None)
        )
        try:
            outcome = await self._submitter.submit(state.slot, state.service, state.contact, identity)
        except Exception:
            self._set_state(replace(self._state, submission_status=SubmissionStatus.IDLE))
            raise

        if outcome.succeeded:
            return await self._handle_booked(outcome)
        return await self._handle_rejected(outcome)

    async def _handle_booked(self, outcome: BookingOutcome) -> SubmissionResult:
        confirmation = outcome.confirmation
        redirect = self._success_redirect_url if self._on_success is SuccessPolicy.REDIRECT else None
        self._set_state(
            replace(
                self._state,
                chosen_date=None,
                service=None,
                slot=None,
                slots=(),
                contact=ContactInfo(),
                submission_status=SubmissionStatus.SUCCEEDED,
                last_error=None,
                confirmation=confirmation,
                redirect_url=redirect,
            )
        )
        # the booked window has shrunk or gone; resync only after the reply is in
        await self.refresh()
        return SubmissionResult(action="booked", confirmation=confirmation, redirect_url=redirect)

    async def _handle_rejected(self, outcome: BookingOutcome) -> SubmissionResult:
        error = outcome.error
        redirect = None
        if error.kind is BookingErrorKind.RATE_LIMITED and self._on_rate_limited is RateLimitPolicy.REDIRECT:
            redirect = self._blocked_redirect_url

        self._set_state(
            replace(self._state, submission_status=SubmissionStatus.ERROR, last_error=error, redirect_url=redirect)
        )
        if outcome.refresh_windows:
            await self.refresh()

        action = {
            BookingErrorKind.STALE_SLOT: "stale_slot",
            BookingErrorKind.RATE_LIMITED: "rate_limited",
        }.get(error.kind, "failed")
        return SubmissionResult(action=action, error=error, redirect_url=redirect)

    # -- helpers ---------------------------------------------------------------

    def _derive_slots(self, windows: Iterable[OpenWindow], day: date, service: ServiceOption) -> tuple[BookableSlot, ...]:
        return tuple(generate_slots(windows, day, service.duration_minutes, self._timezone, self._clock()))

    def _find_service(self, name: str) -> ServiceOption:
        wanted = (name or "").strip()
        for service in self._state.services:
            if service.name == wanted:
                return service
        raise UnknownServiceError(f"Unknown service: {wanted!r}")

    async def _load_catalog(self) -> None:
        try:
            services = await self._catalog.load_services()
        except CatalogUnavailableError as e:
            self._logger.error("Service catalog unavailable", extra={"reason": str(e)})
            self._set_state(replace(self._state, catalog_error=CATALOG_ERROR_MESSAGE))
            return
        self._set_state(replace(self._state, services=tuple(services), catalog_error=None))

    def _superseded(self, seq: int) -> bool:
        if self._discard_out_of_order and seq < self._applied_seq:
            return True
        self._applied_seq = max(self._applied_seq, seq)
        return False

    def _ensure_not_submitting(self) -> None:
        if self._state.submission_status is SubmissionStatus.SUBMITTING:
            raise InvalidTransitionError("Selection is locked while a booking is being submitted")

    def _set_state(self, state: SelectionState) -> SelectionState:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return state
