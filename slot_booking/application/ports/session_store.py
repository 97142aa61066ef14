from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from slot_booking.application.use_cases.selection import BookingCoordinator


class SessionStorePort(ABC):
    @abstractmethod
    def add(self, coordinator: "BookingCoordinator") -> str:
        """Register a coordinator and return its new session id."""
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> "BookingCoordinator | None":
        raise NotImplementedError

    @abstractmethod
    def discard(self, session_id: str) -> None:
        raise NotImplementedError
