"""Storage boundary for listings and bookings.

``ListingStore`` is the query/mutate interface the core is written against.
``SqlListingStore`` backs it with the SQLAlchemy models; every call opens
its own session, runs on the default executor and is bounded by a timeout.
A timed-out call is abandoned, not interrupted.
"""
import asyncio
import functools
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Set
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from marketplace.config import STORE_TIMEOUT_SECONDS
from marketplace.database import SessionLocal
from marketplace.models.booking_model import Booking
from marketplace.models.service_model import Service
from marketplace.models.user_model import User
from marketplace.schemas.booking_schema import BookingDraft, BookingResponse, BookingStatus
from marketplace.schemas.result_schema import ErrorKind
from marketplace.schemas.service_schema import ListingFilter, ProviderSummary, ServiceResponse
from marketplace.logger import get_logger

logger = get_logger(__name__)

ACTIVE_BOOKING_INDEX = "uq_bookings_active_service_customer"
# How SQLite names the same index in its error message
ACTIVE_BOOKING_COLUMNS = "bookings.service_id, bookings.customer_id"


class StoreError(Exception):
    """Base class for storage failures."""


class StoreFetchError(StoreError):
    pass


class StoreInsertError(StoreError):
    pass


class StoreConflictError(StoreInsertError):
    """A write was refused by a uniqueness constraint."""


class StoreTimeoutError(StoreError):
    pass


def error_kind_for(exc: StoreError, default: ErrorKind) -> ErrorKind:
    if isinstance(exc, StoreTimeoutError):
        return ErrorKind.timeout
    if isinstance(exc, StoreConflictError):
        return ErrorKind.already_booked
    return default


class ListingStore(ABC):
    @abstractmethod
    async def fetch_services(self, listing_filter: ListingFilter) -> List[ServiceResponse]:
        """Active services matching the filter, in store order."""

    @abstractmethod
    async def fetch_providers(self, ids: Set[str]) -> List[ProviderSummary]:
        ...

    @abstractmethod
    async def fetch_bookings(
            self, service_id: str, customer_id: str, status_in: Iterable[BookingStatus]
    ) -> List[BookingResponse]:
        ...

    @abstractmethod
    async def insert_booking(self, draft: BookingDraft) -> BookingResponse:
        ...

    @abstractmethod
    async def fetch_service(self, service_id: str) -> Optional[ServiceResponse]:
        ...

    @abstractmethod
    async def fetch_customer_bookings(self, customer_id: str) -> List[BookingResponse]:
        ...


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _is_active_booking_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return ACTIVE_BOOKING_INDEX in message or ACTIVE_BOOKING_COLUMNS in message


class SqlListingStore(ListingStore):
    def __init__(self, session_factory, timeout: float = STORE_TIMEOUT_SECONDS):
        self.session_factory = session_factory
        self.timeout = timeout

    async def _run(self, operation: str, error_cls, fn, *args):
        try:
            loop = asyncio.get_running_loop()
            call = loop.run_in_executor(None, functools.partial(fn, *args))
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Store {operation} timed out after {self.timeout}s")
            raise StoreTimeoutError(f"{operation} timed out")
        except StoreError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Store {operation} failed: {str(e)}")
            raise error_cls(f"{operation} failed") from e

    # Reads

    async def fetch_services(self, listing_filter: ListingFilter) -> List[ServiceResponse]:
        return await self._run("fetch_services", StoreFetchError, self._query_services, listing_filter)

    def _query_services(self, listing_filter: ListingFilter) -> List[ServiceResponse]:
        with self.session_factory() as db:
            query = db.query(Service).filter(Service.is_active == True)

            # Case-insensitive equality, not a substring search
            if listing_filter.category:
                query = query.filter(
                    Service.category.ilike(_escape_like(listing_filter.category), escape="\\")
                )
            if listing_filter.city:
                query = query.filter(Service.city == listing_filter.city)

            rows = query.order_by(Service.created_at, Service.id).all()
            return [ServiceResponse.model_validate(row) for row in rows]

    async def fetch_providers(self, ids: Set[str]) -> List[ProviderSummary]:
        return await self._run("fetch_providers", StoreFetchError, self._query_providers, set(ids))

    def _query_providers(self, ids: Set[str]) -> List[ProviderSummary]:
        if not ids:
            return []
        with self.session_factory() as db:
            rows = db.query(User.id, User.full_name).filter(User.id.in_(ids)).all()
            return [ProviderSummary(id=row.id, display_name=row.full_name) for row in rows]

    async def fetch_bookings(
            self, service_id: str, customer_id: str, status_in: Iterable[BookingStatus]
    ) -> List[BookingResponse]:
        statuses = [BookingStatus(s).value for s in status_in]
        return await self._run(
            "fetch_bookings", StoreFetchError, self._query_bookings, service_id, customer_id, statuses
        )

    def _query_bookings(self, service_id: str, customer_id: str, statuses: List[str]) -> List[BookingResponse]:
        with self.session_factory() as db:
            rows = (
                db.query(Booking)
                .filter(
                    Booking.service_id == service_id,
                    Booking.customer_id == customer_id,
                    Booking.status.in_(statuses),
                )
                .all()
            )
            return [BookingResponse.model_validate(row) for row in rows]

    async def fetch_service(self, service_id: str) -> Optional[ServiceResponse]:
        return await self._run("fetch_service", StoreFetchError, self._query_service, service_id)

    def _query_service(self, service_id: str) -> Optional[ServiceResponse]:
        with self.session_factory() as db:
            row = db.query(Service).filter(Service.id == service_id).first()
            return ServiceResponse.model_validate(row) if row else None

    async def fetch_customer_bookings(self, customer_id: str) -> List[BookingResponse]:
        return await self._run(
            "fetch_customer_bookings", StoreFetchError, self._query_customer_bookings, customer_id
        )

    def _query_customer_bookings(self, customer_id: str) -> List[BookingResponse]:
        with self.session_factory() as db:
            rows = (
                db.query(Booking)
                .filter(Booking.customer_id == customer_id)
                .order_by(Booking.created_at.desc())
                .all()
            )
            return [BookingResponse.model_validate(row) for row in rows]

    # Writes

    async def insert_booking(self, draft: BookingDraft) -> BookingResponse:
        return await self._run("insert_booking", StoreInsertError, self._insert_booking, draft)

    def _insert_booking(self, draft: BookingDraft) -> BookingResponse:
        with self.session_factory() as db:
            db_booking = Booking(
                service_id=draft.service_id,
                customer_id=draft.customer_id,
                provider_id=draft.provider_id,
                status=draft.status.value,
                booking_date=draft.booking_date,
            )
            db.add(db_booking)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                if _is_active_booking_violation(e):
                    logger.warning(
                        f"Active booking already stored for service {draft.service_id} "
                        f"and customer {draft.customer_id}"
                    )
                    raise StoreConflictError("active booking already exists") from e
                logger.error(f"Error inserting booking: {str(e)}")
                raise StoreInsertError("insert_booking failed") from e
            except SQLAlchemyError:
                db.rollback()
                raise
            db.refresh(db_booking)
            return BookingResponse.model_validate(db_booking)


listing_store = SqlListingStore(SessionLocal)
