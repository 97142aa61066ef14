from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from slot_booking.application.dto.backend import ServiceOptionDTO
from slot_booking.application.exceptions import CatalogUnavailableError
from slot_booking.application.ports.service_catalog import ServiceCatalogPort
from slot_booking.domain.entities.service_option import ServiceOption
from slot_booking.infrastructure.catalog.service_catalog_data import DEFAULT_SERVICES

_CATALOG_ADAPTER = TypeAdapter(list[ServiceOptionDTO])

logger = logging.getLogger(__name__)


def parse_catalog(data: Any) -> list[ServiceOption]:
    """Validate a `[{name, duration}]` document. Duplicate names keep the first entry."""
    try:
        entries = _CATALOG_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise CatalogUnavailableError(f"Service catalog has unexpected shape: {e}") from e

    services: dict[str, ServiceOption] = {}
    for entry in entries:
        name = entry.name.strip()
        if name in services:
            logger.warning("Duplicate service in catalog", extra={"service": name})
            continue
        services[name] = ServiceOption(name=name, duration_minutes=entry.duration)
    return list(services.values())


class StaticServiceCatalog(ServiceCatalogPort):
    def __init__(self, path: str | None = None, services: list[ServiceOption] | None = None) -> None:
        self._path = Path(path) if path else None
        self._services = services

    async def load_services(self) -> list[ServiceOption]:
        if self._path is None:
            return list(self._services if self._services is not None else DEFAULT_SERVICES)

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogUnavailableError(f"Cannot read service catalog {self._path}: {e}") from e
        return parse_catalog(data)


class HttpServiceCatalog(ServiceCatalogPort):
    def __init__(self, url: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def load_services(self) -> list[ServiceOption]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._url)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CatalogUnavailableError(f"Cannot fetch service catalog {self._url}: {e}") from e
        return parse_catalog(data)
