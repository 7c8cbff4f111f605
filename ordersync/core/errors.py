"""
ordersync — Error taxonomy

Read failures are swallowed at repository boundaries and replaced with safe
defaults. Everything else propagates to the caller.
"""


class OrderSyncError(Exception):
    """Base class for every error raised by this package."""


class StorageReadError(OrderSyncError):
    """The key-value store could not be read. Non-fatal."""


class StorageWriteError(OrderSyncError):
    """The key-value store rejected a write. Fatal for that operation."""


class NetworkError(OrderSyncError):
    """Timeout or connectivity failure talking to the remote service. Retryable."""

    def __init__(self, message: str, status_code: int = 503):
        super().__init__(message)
        self.status_code = status_code


class BusinessRejection(OrderSyncError):
    """The remote service answered but declined the request."""

    def __init__(self, message: str, status_code: int = 400, error_code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class ValidationFailure(OrderSyncError):
    """Local validation failed before any IO. Carries every violated rule."""

    def __init__(self, errors: list[str]):
        super().__init__(", ".join(errors))
        self.errors = list(errors)


class NotFoundError(OrderSyncError):
    pass


class OrderStateError(OrderSyncError):
    """The requested transition is not allowed from the order's current status."""


class MenuUnavailableError(OrderSyncError):
    pass


class RetryExhaustedError(OrderSyncError):
    def __init__(self, message: str, attempts: int, last_error: str | None = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error
