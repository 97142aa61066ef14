from __future__ import annotations

import logging
from typing import Any
from zoneinfo import ZoneInfo

import httpx
from pydantic import ValidationError

from slot_booking.application.dto.backend import BookingRequestDTO, CancelRequestDTO, WindowsPayloadDTO
from slot_booking.application.exceptions import (
    BackendRateLimitedError,
    BackendTransportError,
    BackendUnavailableError,
)
from slot_booking.application.ports.booking_backend import BackendReply, BookingBackendPort
from slot_booking.core.config import settings
from slot_booking.domain.entities.time_window import OpenWindow

FINGERPRINT_HEADER = "Fingerprint"
API_KEY_HEADER = "X-API-KEY"


class HttpBookingBackend(BookingBackendPort):
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timezone: ZoneInfo | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.BOOKING_API_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.BOOKING_API_KEY
        self._timezone = timezone or ZoneInfo(settings.BUSINESS_TIMEZONE)
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    async def fetch_windows(self, identity: str) -> list[OpenWindow]:
        url = f"{self._base_url}/"
        try:
            response = await self._client.get(url, headers={FINGERPRINT_HEADER: identity})
        except httpx.HTTPError as e:
            raise BackendTransportError(f"GET {url} failed: {e}") from e

        if response.status_code == 429:
            raise BackendRateLimitedError("Windows fetch rate limited")
        if response.status_code >= 400:
            raise BackendUnavailableError(
                f"Windows fetch returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = WindowsPayloadDTO.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise BackendUnavailableError(f"Windows payload has unexpected shape: {e}") from e

        windows = payload.to_entities(self._timezone)
        self._logger.info("Windows fetched", extra={"status": response.status_code, "reason": f"count={len(windows)}"})
        return windows

    async def create_booking(self, request: BookingRequestDTO, identity: str) -> BackendReply:
        headers = {
            API_KEY_HEADER: self._api_key or "",
            FINGERPRINT_HEADER: identity,
        }
        return await self._post("/book", request.to_wire(), headers)

    async def cancel_booking(self, event_id: str, email: str) -> BackendReply:
        body = CancelRequestDTO(event_id=event_id, email=email).model_dump()
        return await self._post("/cancel", body, {})

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, body: dict[str, Any], headers: dict[str, str]) -> BackendReply:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise BackendTransportError(f"POST {url} failed: {e}") from e

        if response.status_code >= 400:
            self._logger.warning("Backend rejected request", extra={"status": response.status_code, "reason": path})
        return BackendReply(status_code=response.status_code, payload=_json_object(response))


def _json_object(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {"detail": response.text} if response.text else {}
    return data if isinstance(data, dict) else {"data": data}
