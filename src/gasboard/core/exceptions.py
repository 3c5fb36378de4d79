"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class InvalidAddressError(AppError):
    """Raised for a malformed wallet address, before any network call."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Invalid Solana address: {address!r}", code="INVALID_ADDRESS")


class RateLimitedError(AppError):
    """Raised when an upstream host answers with HTTP 429 (or equivalent)."""

    def __init__(self, message: str):
        super().__init__(message, code="RATE_LIMITED")


class TransportError(AppError):
    """Raised for network failures, timeouts and malformed upstream payloads."""

    def __init__(self, message: str):
        super().__init__(message, code="TRANSPORT_ERROR")


class PartialDataLossError(AppError):
    """Raised when some transaction bodies of a day could not be fetched."""

    def __init__(self, date: str, fetched: int, expected: int):
        self.date = date
        self.fetched = fetched
        self.expected = expected
        super().__init__(
            f"Only {fetched} of {expected} transactions retrievable for {date}",
            code="PARTIAL_DATA_LOSS",
        )


class PriceUnavailableError(AppError):
    """Raised by price feeds when no usable price could be obtained."""

    def __init__(self, message: str):
        super().__init__(message, code="PRICE_UNAVAILABLE")


class SyncFailedError(AppError):
    """Raised when the signature scan of a sync run cannot complete."""

    def __init__(self, message: str):
        super().__init__(message, code="SYNC_FAILED")
