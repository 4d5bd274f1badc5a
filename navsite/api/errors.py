from fastapi import HTTPException, status

from navsite.services.errors import InputValidationError, StoreError, StoreErrorKind

STORE_ERROR_STATUS: dict[StoreErrorKind, int] = {
    StoreErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    StoreErrorKind.REMOTE_REJECTED: status.HTTP_502_BAD_GATEWAY,
    StoreErrorKind.AUTH_EXPIRED: status.HTTP_502_BAD_GATEWAY,
    StoreErrorKind.NETWORK_ERROR: status.HTTP_504_GATEWAY_TIMEOUT,
    StoreErrorKind.NOT_CONFIGURED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def store_http_exception(exc: StoreError, *, action: str) -> HTTPException:
    status_code = STORE_ERROR_STATUS.get(exc.kind, status.HTTP_502_BAD_GATEWAY)
    return HTTPException(status_code=status_code, detail=f"{action} failed: {exc.message}")


def validation_http_exception(exc: InputValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
