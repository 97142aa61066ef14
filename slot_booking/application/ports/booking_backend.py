from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from slot_booking.application.dto.backend import BookingRequestDTO
from slot_booking.domain.entities.time_window import OpenWindow


@dataclass(frozen=True)
class BackendReply:
    status_code: int
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class BookingBackendPort(ABC):
    @abstractmethod
    async def fetch_windows(self, identity: str) -> list[OpenWindow]:
        """Fetch the current open windows. Raises on throttling, bad status or transport failure."""
        raise NotImplementedError

    @abstractmethod
    async def create_booking(self, request: BookingRequestDTO, identity: str) -> BackendReply:
        """Submit one booking. Returns the reply for any HTTP status; raises only on transport failure."""
        raise NotImplementedError

    @abstractmethod
    async def cancel_booking(self, event_id: str, email: str) -> BackendReply:
        """Cancel a booking by event id. Raises only on transport failure."""
        raise NotImplementedError
