class BackendTransportError(RuntimeError):
    """Raised when the booking backend could not be reached (no response received)."""
    pass


class BackendRateLimitedError(RuntimeError):
    """Raised when the booking backend throttles this device (HTTP 429)."""
    pass


class BackendUnavailableError(RuntimeError):
    """Raised when a fetch gets a non-2xx status or a payload of the wrong shape."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CatalogUnavailableError(RuntimeError):
    """Raised when the service catalog cannot be loaded or parsed."""
    pass


class InvalidTransitionError(ValueError):
    """Raised when a selection transition is attempted without its precondition."""
    pass


class UnavailableDateError(InvalidTransitionError):
    pass


class UnknownServiceError(InvalidTransitionError):
    pass


class UnavailableSlotError(InvalidTransitionError):
    pass
