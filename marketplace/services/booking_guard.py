"""Pre-insertion checks for a booking request.

The guard reads current booking state and the insert happens afterwards in
``BookingService``; the two steps are not atomic. Two concurrent requests
for the same service and customer can both pass the guard. The partial
unique index on ``bookings`` is what finally rejects the second insert.
"""
from typing import Optional
from pydantic import BaseModel
from marketplace.schemas.booking_schema import ACTIVE_BOOKING_STATUSES
from marketplace.schemas.result_schema import ErrorKind
from marketplace.services.listing_store import ListingStore, listing_store
from marketplace.logger import get_logger

logger = get_logger(__name__)


class GuardDecision(BaseModel):
    allowed: bool
    reason: Optional[ErrorKind] = None
    message: str = ""
    # Provider of the service as stored, set when allowed
    provider_id: Optional[str] = None

    @classmethod
    def allow(cls, provider_id: str) -> "GuardDecision":
        return cls(allowed=True, provider_id=provider_id)

    @classmethod
    def reject(cls, reason: ErrorKind, message: str) -> "GuardDecision":
        return cls(allowed=False, reason=reason, message=message)


class BookingGuard:
    def __init__(self, store: ListingStore):
        self.store = store

    async def check(
            self, service_id: str, customer_id: Optional[str], provider_id: Optional[str] = None
    ) -> GuardDecision:
        """Decide whether ``customer_id`` may book ``service_id``.

        Store failures are not decisions; they propagate as ``StoreError``.
        """
        if not customer_id:
            return GuardDecision.reject(ErrorKind.unauthenticated, "Please login to book a service")

        if provider_id is not None and customer_id == provider_id:
            return GuardDecision.reject(ErrorKind.self_booking, "You cannot book your own service")

        existing = await self.store.fetch_bookings(service_id, customer_id, ACTIVE_BOOKING_STATUSES)
        if existing:
            return GuardDecision.reject(
                ErrorKind.already_booked, "You already have an active booking for this service"
            )

        service = await self.store.fetch_service(service_id)
        if service is None or not service.is_active:
            return GuardDecision.reject(ErrorKind.service_not_found, "Service not found or is inactive")

        if provider_id is not None and provider_id != service.provider_id:
            logger.warning(
                f"Provider {provider_id} given for service {service_id} does not match stored provider "
                f"{service.provider_id}"
            )
        if customer_id == service.provider_id:
            return GuardDecision.reject(ErrorKind.self_booking, "You cannot book your own service")

        return GuardDecision.allow(service.provider_id)


booking_guard = BookingGuard(listing_store)
