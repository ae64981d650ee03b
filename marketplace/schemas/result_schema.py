from pydantic import BaseModel
from typing import Generic, Optional, TypeVar
from enum import Enum

T = TypeVar("T")


class ErrorKind(str, Enum):
    fetch_failed = "fetch_failed"
    insert_failed = "insert_failed"
    unauthenticated = "unauthenticated"
    self_booking = "self_booking"
    already_booked = "already_booked"
    service_not_found = "service_not_found"
    timeout = "timeout"


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    kind: ErrorKind
    message: str
    retryable: bool = False


class Result(BaseModel, Generic[T]):
    """Outcome of a core operation.

    ``ok`` is True with ``data`` set on success. On failure ``error`` carries
    the kind, so an empty listing and a failed fetch stay distinguishable.
    """

    model_config = {"frozen": True}

    ok: bool
    data: Optional[T] = None
    error: Optional[ServiceError] = None

    @classmethod
    def success(cls, data: T) -> "Result[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(
            ok=False,
            error=ServiceError(kind=kind, message=message, retryable=kind == ErrorKind.timeout),
        )
