from enum import Enum


class StoreErrorKind(str, Enum):
    AUTH_EXPIRED = "auth_expired"
    NOT_FOUND = "not_found"
    REMOTE_REJECTED = "remote_rejected"
    NETWORK_ERROR = "network_error"
    NOT_CONFIGURED = "not_configured"


class StoreError(Exception):
    """Base error for calls against the remote table store."""

    kind: StoreErrorKind = StoreErrorKind.REMOTE_REJECTED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StoreAuthExpiredError(StoreError):
    """Raised when the tenant token is missing, invalid or expired."""

    kind = StoreErrorKind.AUTH_EXPIRED


class StoreNotFoundError(StoreError):
    """Raised when the requested record or table does not exist."""

    kind = StoreErrorKind.NOT_FOUND


class StoreRejectedError(StoreError):
    """Raised when the store answers with a non-success status or code."""

    kind = StoreErrorKind.REMOTE_REJECTED


class StoreNetworkError(StoreError):
    """Raised on timeouts and connection failures."""

    kind = StoreErrorKind.NETWORK_ERROR


class StoreNotConfiguredError(StoreError):
    """Raised when the coordinates or credentials for a table are missing."""

    kind = StoreErrorKind.NOT_CONFIGURED


class InputValidationError(Exception):
    """Raised when submitted or staged data fails validation."""
