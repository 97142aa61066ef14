from __future__ import annotations

import logging
from collections.abc import Callable
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException

from slot_booking.api.v1.schemas import (
    BookingErrorSchema,
    ChooseDateRequestSchema,
    ChooseServiceRequestSchema,
    ChooseTimeRequestSchema,
    ConfirmationSchema,
    CreateSessionRequestSchema,
    ServiceSchema,
    SessionViewSchema,
    SlotSchema,
    SubmitRequestSchema,
    SubmitResponseSchema,
)
from slot_booking.application.exceptions import UnavailableSlotError
from slot_booking.application.ports.session_store import SessionStorePort
from slot_booking.application.use_cases.selection import BookingCoordinator
from slot_booking.core.config import settings
from slot_booking.domain.entities.booking import BookingConfirmation, BookingError
from slot_booking.domain.entities.contact_info import ContactInfo
from slot_booking.domain.entities.time_window import BookableSlot, to_business_zone
from slot_booking.wiring.dependencies import build_session_coordinator, get_session_store


router = APIRouter(prefix="/api/v1/sessions")
logger = logging.getLogger(__name__)


def get_coordinator_factory() -> Callable[[str | None], BookingCoordinator]:
    return build_session_coordinator


def _get_coordinator(session_id: str, store: SessionStorePort) -> BookingCoordinator:
    coordinator = store.get(session_id)
    if coordinator is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return coordinator


def _slot_schema(slot: BookableSlot, tz: ZoneInfo) -> SlotSchema:
    start = slot.start.astimezone(tz)
    return SlotSchema(start=start.isoformat(), end=slot.end.astimezone(tz).isoformat(), label=start.strftime("%H:%M"))


def _error_schema(error: BookingError | None) -> BookingErrorSchema | None:
    if error is None:
        return None
    return BookingErrorSchema(
        kind=error.kind.value,
        message=error.message,
        status_code=error.status_code,
        field_errors=dict(error.field_errors),
    )


def _confirmation_schema(confirmation: BookingConfirmation | None, tz: ZoneInfo) -> ConfirmationSchema | None:
    if confirmation is None:
        return None
    return ConfirmationSchema(
        event_id=confirmation.event_id,
        service=confirmation.service_name,
        start=confirmation.slot.start.astimezone(tz).isoformat(),
        end=confirmation.slot.end.astimezone(tz).isoformat(),
        name=confirmation.contact.name,
        email=confirmation.contact.email,
        payload=confirmation.payload,
    )


def build_session_view(session_id: str, coordinator: BookingCoordinator) -> SessionViewSchema:
    state = coordinator.state
    tz = coordinator.timezone
    return SessionViewSchema(
        session_id=session_id,
        phase=state.phase.value,
        availability_status=state.availability_status.value,
        availability_error=state.availability_error,
        catalog_error=state.catalog_error,
        services=[ServiceSchema(name=s.name, duration=s.duration_minutes) for s in state.services],
        available_dates=sorted(d.isoformat() for d in coordinator.available_dates),
        chosen_date=state.chosen_date.isoformat() if state.chosen_date else None,
        service=state.service.name if state.service else None,
        slots=[_slot_schema(s, tz) for s in state.slots],
        slot=_slot_schema(state.slot, tz) if state.slot else None,
        name=state.contact.name,
        email=state.contact.email,
        submission_status=state.submission_status.value,
        error=_error_schema(state.last_error),
        confirmation=_confirmation_schema(state.confirmation, tz),
        redirect_url=state.redirect_url,
    )


@router.post("", response_model=SessionViewSchema)
async def create_session(
    payload: CreateSessionRequestSchema | None = None,
    store: SessionStorePort = Depends(get_session_store),
    coordinator_factory: Callable[[str | None], BookingCoordinator] = Depends(get_coordinator_factory),
) -> SessionViewSchema:
    coordinator = coordinator_factory(payload.fingerprint if payload else None)
    session_id = store.add(coordinator)
    await coordinator.load()
    logger.info(
        "Session created",
        extra={"session_id": session_id, "status": coordinator.state.availability_status.value},
    )
    return build_session_view(session_id, coordinator)


@router.get("/{session_id}", response_model=SessionViewSchema)
async def get_session(session_id: str, store: SessionStorePort = Depends(get_session_store)) -> SessionViewSchema:
    coordinator = _get_coordinator(session_id, store)
    await coordinator.refresh_if_stale(settings.WINDOWS_MAX_AGE_SECONDS)
    return build_session_view(session_id, coordinator)


@router.post("/{session_id}/refresh", response_model=SessionViewSchema)
async def refresh_session(session_id: str, store: SessionStorePort = Depends(get_session_store)) -> SessionViewSchema:
    coordinator = _get_coordinator(session_id, store)
    if not coordinator.state.services:
        await coordinator.load()
    else:
        await coordinator.refresh()
    return build_session_view(session_id, coordinator)


@router.post("/{session_id}/date", response_model=SessionViewSchema)
async def choose_date(
    session_id: str,
    payload: ChooseDateRequestSchema,
    store: SessionStorePort = Depends(get_session_store),
) -> SessionViewSchema:
    coordinator = _get_coordinator(session_id, store)
    coordinator.choose_date(payload.date)
    return build_session_view(session_id, coordinator)


@router.post("/{session_id}/service", response_model=SessionViewSchema)
async def choose_service(
    session_id: str,
    payload: ChooseServiceRequestSchema,
    store: SessionStorePort = Depends(get_session_store),
) -> SessionViewSchema:
    coordinator = _get_coordinator(session_id, store)
    coordinator.choose_service(payload.name)
    return build_session_view(session_id, coordinator)


@router.post("/{session_id}/time", response_model=SessionViewSchema)
async def choose_time(
    session_id: str,
    payload: ChooseTimeRequestSchema,
    store: SessionStorePort = Depends(get_session_store),
) -> SessionViewSchema:
    coordinator = _get_coordinator(session_id, store)
    start = to_business_zone(payload.start, coordinator.timezone)
    slot = coordinator.find_slot(start)
    if slot is None:
        raise UnavailableSlotError(f"{start.isoformat()} is not among the offered times")
    coordinator.choose_time(slot)
    return build_session_view(session_id, coordinator)


@router.post("/{session_id}/submit", response_model=SubmitResponseSchema)
async def submit_booking(
    session_id: str,
    payload: SubmitRequestSchema,
    store: SessionStorePort = Depends(get_session_store),
) -> SubmitResponseSchema:
    coordinator = _get_coordinator(session_id, store)
    result = await coordinator.submit(ContactInfo(name=payload.name, email=payload.email))
    logger.info(
        "Submission finished",
        extra={
            "session_id": session_id,
            "status": result.action,
            "error_kind": result.error.kind.value if result.error else None,
        },
    )
    return SubmitResponseSchema(
        action=result.action,
        error=_error_schema(result.error),
        confirmation=_confirmation_schema(result.confirmation, coordinator.timezone),
        redirect_url=result.redirect_url,
        session=build_session_view(session_id, coordinator),
    )
