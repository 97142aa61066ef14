from __future__ import annotations

import logging
from collections.abc import Callable

from slot_booking.application.ports.identity import IdentityProviderPort, IdentityStorePort
from slot_booking.infrastructure.identity.fingerprint import compute_device_fingerprint


class IdentityProvider(IdentityProviderPort):
    """Read the cached identity if present, otherwise compute it once and store it."""

    def __init__(
        self,
        store: IdentityStorePort,
        compute: Callable[[], str] = compute_device_fingerprint,
    ) -> None:
        self._store = store
        self._compute = compute
        self._logger = logging.getLogger(__name__)

    def get_identity(self) -> str:
        identity = self._store.read()
        if identity:
            return identity
        identity = self._compute()
        self._store.write(identity)
        self._logger.info("Device identity created")
        return identity


class StaticIdentityProvider(IdentityProviderPort):
    def __init__(self, identity: str) -> None:
        if not identity:
            raise ValueError("identity must not be empty")
        self._identity = identity

    def get_identity(self) -> str:
        return self._identity
