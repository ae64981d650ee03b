from fastapi import HTTPException, status
from marketplace.schemas.result_schema import ErrorKind, ServiceError

ERROR_STATUS_CODES = {
    ErrorKind.unauthenticated: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.self_booking: status.HTTP_403_FORBIDDEN,
    ErrorKind.service_not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.already_booked: status.HTTP_409_CONFLICT,
    ErrorKind.fetch_failed: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.insert_failed: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.timeout: status.HTTP_504_GATEWAY_TIMEOUT,
}


def http_error(error: ServiceError) -> HTTPException:
    headers = {"Retry-After": "1"} if error.retryable else None
    if error.kind == ErrorKind.unauthenticated:
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(
        status_code=ERROR_STATUS_CODES.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"kind": error.kind.value, "message": error.message},
        headers=headers,
    )
