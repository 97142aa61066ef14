from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


class CreateSessionRequestSchema(BaseModel):
    fingerprint: str | None = Field(default=None, max_length=200)


class ChooseDateRequestSchema(BaseModel):
    date: date


class ChooseServiceRequestSchema(BaseModel):
    name: str = Field(min_length=1)


class ChooseTimeRequestSchema(BaseModel):
    start: datetime


class SubmitRequestSchema(BaseModel):
    name: str = ""
    email: str = ""


class ServiceSchema(BaseModel):
    name: str
    duration: int


class SlotSchema(BaseModel):
    start: str
    end: str
    label: str  # HH:MM in the business time zone


class BookingErrorSchema(BaseModel):
    kind: str
    message: str
    status_code: int | None = None
    field_errors: dict[str, str] = Field(default_factory=dict)


class ConfirmationSchema(BaseModel):
    event_id: str | None = None
    service: str
    start: str
    end: str
    name: str
    email: str
    payload: dict[str, Any] = Field(default_factory=dict)


class SessionViewSchema(BaseModel):
    session_id: str
    phase: str
    availability_status: str
    availability_error: str | None = None
    catalog_error: str | None = None
    services: list[ServiceSchema] = Field(default_factory=list)
    available_dates: list[str] = Field(default_factory=list)
    chosen_date: str | None = None
    service: str | None = None
    slots: list[SlotSchema] = Field(default_factory=list)
    slot: SlotSchema | None = None
    name: str = ""
    email: str = ""
    submission_status: str
    error: BookingErrorSchema | None = None
    confirmation: ConfirmationSchema | None = None
    redirect_url: str | None = None


class SubmitResponseSchema(BaseModel):
    action: str
    error: BookingErrorSchema | None = None
    confirmation: ConfirmationSchema | None = None
    redirect_url: str | None = None
    session: SessionViewSchema


class CancelResponseSchema(BaseModel):
    status: str
    message: str
