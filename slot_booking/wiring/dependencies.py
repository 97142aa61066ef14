from datetime import datetime
from functools import lru_cache
import logging
import uuid
from zoneinfo import ZoneInfo

from slot_booking.application.ports.booking_backend import BookingBackendPort
from slot_booking.application.ports.identity import IdentityProviderPort
from slot_booking.application.ports.service_catalog import ServiceCatalogPort
from slot_booking.application.ports.session_store import SessionStorePort
from slot_booking.application.use_cases.cancel_booking import CancelBookingUseCase
from slot_booking.application.use_cases.selection import BookingCoordinator
from slot_booking.core.config import settings
from slot_booking.infrastructure.backend.http_backend import HttpBookingBackend
from slot_booking.infrastructure.backend.mock_backend import MockBookingBackend
from slot_booking.infrastructure.catalog.service_catalog_store import HttpServiceCatalog, StaticServiceCatalog
from slot_booking.infrastructure.identity.identity_provider import IdentityProvider, StaticIdentityProvider
from slot_booking.infrastructure.identity.identity_store import JsonIdentityStore, MemoryIdentityStore
from slot_booking.infrastructure.store.memory_session_store import MemorySessionStore


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


@lru_cache
def get_booking_backend() -> BookingBackendPort:
    logger = logging.getLogger(__name__)
    if not settings.BOOKING_API_KEY and settings.ENV.lower() in {"dev", "local"}:
        tz = get_timezone()
        logger.info("Using MockBookingBackend (BOOKING_API_KEY missing, ENV=dev/local)")
        return MockBookingBackend.with_working_days(datetime.now(tz).date(), days=21, timezone=tz)
    logger.info("Using HttpBookingBackend", extra={"reason": settings.BOOKING_API_URL})
    return HttpBookingBackend()


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    if settings.SERVICE_CATALOG_URL:
        return HttpServiceCatalog(settings.SERVICE_CATALOG_URL, timeout=settings.HTTP_TIMEOUT_SECONDS)
    return StaticServiceCatalog(path=settings.SERVICE_CATALOG_PATH)


@lru_cache
def get_identity_provider() -> IdentityProviderPort:
    if settings.IDENTITY_STORE_PATH:
        return IdentityProvider(JsonIdentityStore(settings.IDENTITY_STORE_PATH))
    return IdentityProvider(MemoryIdentityStore())


@lru_cache
def get_session_store() -> SessionStorePort:
    return MemorySessionStore()


def build_coordinator(fingerprint: str | None = None) -> BookingCoordinator:
    identity = StaticIdentityProvider(fingerprint) if fingerprint else get_identity_provider()
    return BookingCoordinator(
        backend=get_booking_backend(),
        catalog=get_service_catalog(),
        identity=identity,
        timezone=get_timezone(),
        on_success=settings.ON_SUCCESS,
        on_rate_limited=settings.ON_RATE_LIMITED,
        success_redirect_url=settings.SUCCESS_REDIRECT_URL,
        blocked_redirect_url=settings.BLOCKED_REDIRECT_URL,
        discard_out_of_order_fetches=settings.DISCARD_OUT_OF_ORDER_FETCHES,
    )


def build_session_coordinator(fingerprint: str | None = None) -> BookingCoordinator:
    # one token per session when the browser sent none
    return build_coordinator(fingerprint or uuid.uuid4().hex)


def get_cancel_booking_use_case() -> CancelBookingUseCase:
    return CancelBookingUseCase(backend=get_booking_backend())


async def shutdown_dependencies() -> None:
    if get_booking_backend.cache_info().currsize:
        backend = get_booking_backend()
        if isinstance(backend, HttpBookingBackend):
            await backend.aclose()
