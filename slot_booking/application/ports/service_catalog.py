from __future__ import annotations

from abc import ABC, abstractmethod

from slot_booking.domain.entities.service_option import ServiceOption


class ServiceCatalogPort(ABC):
    @abstractmethod
    async def load_services(self) -> list[ServiceOption]:
        """Load the service catalog. Raises CatalogUnavailableError on failure."""
        raise NotImplementedError
