from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from slot_booking.domain.entities.time_window import OpenWindow, to_business_zone


class WindowDTO(BaseModel):
    start: datetime
    end: datetime
    event_id: str | None = None

    def to_entity(self, timezone: ZoneInfo) -> OpenWindow | None:
        start = to_business_zone(self.start, timezone)
        end = to_business_zone(self.end, timezone)
        if end.timestamp() < start.timestamp():
            return None
        return OpenWindow(start=start, end=end, source_id=self.event_id)


class WindowsPayloadDTO(BaseModel):
    terminy: list[WindowDTO] = Field(default_factory=list)

    def to_entities(self, timezone: ZoneInfo) -> list[OpenWindow]:
        windows = (item.to_entity(timezone) for item in self.terminy)
        return [w for w in windows if w is not None]


class SlotDTO(BaseModel):
    start: str
    end: str


class CustomerInfoDTO(BaseModel):
    name: str
    email: str
    haircut: str


class BookingRequestDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slot: SlotDTO
    customer_info: CustomerInfoDTO = Field(alias="customerInfo")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class ErrorBodyDTO(BaseModel):
    detail: str | None = None

    @field_validator("detail", mode="before")
    @classmethod
    def _stringify(cls, value):
        # FastAPI-style validation errors send a list here
        if value is None or isinstance(value, str):
            return value
        return str(value)


class CancelRequestDTO(BaseModel):
    event_id: str
    email: str


class ServiceOptionDTO(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    duration: PositiveInt
