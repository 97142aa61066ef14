from __future__ import annotations

import uuid
from collections import OrderedDict

from slot_booking.application.ports.session_store import SessionStorePort
from slot_booking.application.use_cases.selection import BookingCoordinator


class MemorySessionStore(SessionStorePort):
    def __init__(self, max_sessions: int = 1000) -> None:
        self._sessions: OrderedDict[str, BookingCoordinator] = OrderedDict()
        self._max_sessions = max_sessions

    def add(self, coordinator: BookingCoordinator) -> str:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = coordinator
        # abandoned pages are never closed explicitly; drop the oldest ones
        while len(self._sessions) > self._max_sessions:
            self._sessions.popitem(last=False)
        return session_id

    def get(self, session_id: str) -> BookingCoordinator | None:
        coordinator = self._sessions.get(session_id)
        if coordinator is not None:
            self._sessions.move_to_end(session_id)
        return coordinator

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
